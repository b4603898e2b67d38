import os

from src.visitor_registry.visitor_registry import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        debug=app.config["DEBUG"],
    )
