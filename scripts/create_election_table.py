from election_service.db import create_election_table_if_not_exists, election_table_name


def main():
    table_name = election_table_name()
    if create_election_table_if_not_exists():
        print(f"Created table {table_name}")
    else:
        print(f"Table {table_name} already exists")


if __name__ == "__main__":
    main()
