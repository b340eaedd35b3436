import argparse

from . import __version__
from .env import (
    get_database_url,
    get_log_dir,
    get_log_level,
    get_secret_key,
    get_token_ttl_minutes,
    load_env,
)
from .logger import get_logger


def _configure_logging() -> None:
    # Must run before modules that grab the global logger are imported
    log_dir = get_log_dir()
    get_logger(level=get_log_level(), log_dir=log_dir, enable_file=log_dir is not None)


def cmd_init_db(args: argparse.Namespace) -> None:
    from .database import get_engine, init_database

    url = args.database_url or get_database_url()
    init_database(get_engine(url))
    print(f"Database ready: {url}")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from .api import create_app
    from .database import get_engine, init_database

    engine = get_engine(args.database_url or get_database_url())
    init_database(engine)
    uvicorn.run(create_app(engine=engine), host=args.host, port=args.port)


def cmd_token(args: argparse.Namespace) -> None:
    from .auth import create_token

    ttl = args.ttl if args.ttl is not None else get_token_ttl_minutes()
    print(create_token(args.username, args.admin, get_secret_key(), ttl_minutes=ttl))


def main(argv=None):
    # Load .env if present (JOBLY_SECRET_KEY, JOBLY_DATABASE_URL, etc.)
    load_env()
    _configure_logging()

    parser = argparse.ArgumentParser(prog="jobly", description="Jobly job board API")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create database tables")
    init.add_argument("--database-url", help="SQLAlchemy URL (default: JOBLY_DATABASE_URL)")
    init.set_defaults(func=cmd_init_db)

    srv = subparsers.add_parser("serve", help="Run the API server")
    srv.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    srv.add_argument("--port", type=int, default=3001, help="Port (default: 3001)")
    srv.add_argument("--database-url", help="SQLAlchemy URL (default: JOBLY_DATABASE_URL)")
    srv.set_defaults(func=cmd_serve)

    tok = subparsers.add_parser("token", help="Print a signed token for a user")
    tok.add_argument("--username", required=True, help="Token subject")
    tok.add_argument("--admin", action="store_true", help="Mark the token as admin")
    tok.add_argument("--ttl", type=int, help="Lifetime in minutes (default: JOBLY_TOKEN_TTL_MINUTES, else no expiry)")
    tok.set_defaults(func=cmd_token)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
