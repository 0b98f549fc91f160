import sys
from gql_pager.errors import GqlPagerError
from gql_pager.logging_utils import log
from gql_pager.print_utils import Print


def main():
    try:
        from gql_pager.cli import main_cli
        main_cli()
    except GqlPagerError as e:
        log(f"Command error: {e}")
        Print.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
