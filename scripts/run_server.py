import os

import uvicorn


def main():
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5700"))
    uvicorn.run("election_service.app:app", host=host, port=port)


if __name__ == "__main__":
    main()
