import asyncio
import argparse
from pathlib import Path
from src.jittools.cli import cmd_list, cmd_retrieve, DEFAULT_YAML
from src.utils.logger import configure_logging


def parse_args():
    parser = argparse.ArgumentParser(description="JIT tool retrieval")
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_YAML),
        help="Path to the YAML file holding the 'retrieval' settings and 'tools' catalog."
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # retrieve
    retrieve = sub.add_parser("retrieve", help="Rank tools for a natural-language query")
    retrieve.add_argument("query", type=str)
    retrieve.add_argument("--agent-id", type=str, default=None)
    retrieve.add_argument(
        "--permission", action="append", default=[], dest="permissions",
        help="Granted permission (repeatable). Only used with --agent-id."
    )
    retrieve.add_argument("--max-tools", type=int, default=None)
    retrieve.add_argument("--budget", type=int, default=None, help="Max cumulative token cost")

    # list
    lst = sub.add_parser("list", help="List catalog tools")
    lst.add_argument("--category", type=str, default=None, help="Filter to one category")

    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    configure_logging(args.log_level)
    path = Path(args.config)

    if args.command == "retrieve":
        print(asyncio.run(cmd_retrieve(
            args.query,
            yaml_path=path,
            agent_id=args.agent_id,
            permissions=args.permissions,
            max_tools=args.max_tools,
            max_token_budget=args.budget,
        )))

    elif args.command == "list":
        print(cmd_list(yaml_path=path, category=args.category))
