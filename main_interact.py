import asyncio
import sys

import click
import yaml
from loguru import logger

from draco.config import Config
from draco.errors import ConfigError
from draco.question_handler import QuestionHandler, Reply

USAGE = 'Usage: draco-interact [--raw] {agent_name} ask "Your question"'


def configure_logging(level: str) -> None:
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level>",
    )


def print_reply(reply: Reply, raw: bool = False) -> None:
    if reply.headline:
        click.echo(reply.headline)
    for line in reply.lines:
        click.echo(line, err=reply.is_error)
    if raw and reply.records:
        click.echo(yaml.dump({"records": reply.records}, allow_unicode=True, sort_keys=False))


async def run_question(config: Config, agent_name: str, question: str) -> Reply:
    handler = QuestionHandler.from_config(config)
    try:
        return await handler.ask(agent_name, question)
    finally:
        await handler.close()


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False, "help_option_names": []}
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--raw", is_flag=True, help="Also dump the raw Bitquery rows as YAML. Must precede the agent name.")
def main(args, raw):
    """Ask a registered agent a question about Solana tokens."""
    if len(args) < 3 or args[1] != "ask":
        click.echo(USAGE, err=True)
        sys.exit(1)

    agent_name = args[0]
    question = " ".join(args[2:])

    try:
        config = Config.from_env()
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    configure_logging(config.log_level)
    try:
        reply = asyncio.run(run_question(config, agent_name, question))
    except Exception as e:
        click.echo(f"An error occurred: {str(e)}", err=True)
        return
    print_reply(reply, raw=raw)


if __name__ == "__main__":
    main()
