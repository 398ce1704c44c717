import os

import uvicorn

from .app import create_local_app
from .context import build_context


def main():
    app = create_local_app(build_context())
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
