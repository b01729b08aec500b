import argparse
import uvicorn
from app.core.config import settings

def main():
    parser = argparse.ArgumentParser(description=f"Run the {settings.PROJECT_NAME} server")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to run the server on (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes (default: based on DEBUG setting)"
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply database migrations before starting"
    )

    args = parser.parse_args()
    use_reload = args.reload or settings.DEBUG

    if args.migrate:
        from app.db.init_db import init_db
        init_db()

    if settings.DEBUG:
        print(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode")
        print(f"Auto-reload: {'enabled' if use_reload else 'disabled'}")
        print(f"API documentation: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=use_reload
    )

if __name__ == "__main__":
    main()
