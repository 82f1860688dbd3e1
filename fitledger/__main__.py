"""Entry point for running the API with `python -m fitledger`."""

import uvicorn

if __name__ == "__main__":
    uvicorn.run("fitledger.main:app", host="127.0.0.1", port=8000)
