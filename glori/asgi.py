"""
ASGI entrypoint: expose `app` pour les process managers (ex: gunicorn -k uvicorn.workers.UvicornWorker glori.asgi:app).
"""

from glori.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "glori.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
