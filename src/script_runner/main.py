"""CLI entrypoint for script-runner."""

import logging
import sys
from pathlib import Path

import rich_click as click

from script_runner import __version__
from script_runner.config import Settings
from script_runner.runner.controllers import ScriptRunCommand, ScriptRunnerController
from script_runner.runner.errors import (
    ExitCode,
    InvalidConfigurationError,
    RunConfigurationError,
)
from script_runner.runner.models import OutputOptions

click.rich_click.USE_MARKDOWN = True
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ScriptRunnerCommand(click.RichCommand):
    """Command that reports malformed invocations with a dedicated exit code."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as error:
            error.exit_code = ExitCode.USAGE
            raise


@click.command(cls=ScriptRunnerCommand)
@click.version_option(version=__version__, prog_name="script-runner")
@click.argument("script_path", metavar="SCRIPT", type=click.Path(path_type=Path))
@click.option(
    "-attrs",
    "output_attributes",
    is_flag=True,
    default=False,
    help="Output flow file attributes.",
)
@click.option(
    "-content",
    "output_content",
    is_flag=True,
    default=False,
    help="Output flow file contents.",
)
@click.option(
    "-attrfile",
    "attr_file",
    default="",
    metavar="PATH",
    help="Properties file with attributes to add to incoming flow files.",
)
@click.option(
    "-modules",
    "module_paths",
    default="",
    metavar="CSV",
    help="Comma-separated list of paths (files or directories) containing script modules.",
)
@click.option(
    "-input",
    "input_dir",
    default="",
    metavar="DIR",
    help="Send each file in the specified directory as a flow file to the script.",
)
@click.option(
    "-failure",
    "output_failure",
    is_flag=True,
    default=False,
    help="Output flow files transferred to the failure relationship.",
)
@click.option(
    "-success",
    "output_success",
    is_flag=True,
    default=True,
    show_default=True,
    help="Output flow files transferred to the success relationship.",
)
@click.option(
    "-all",
    "all_output",
    is_flag=True,
    default=False,
    help="Output content, attributes, etc. for flow files in every relationship.",
)
@click.option(
    "-all-rels",
    "all_relationships",
    is_flag=True,
    default=False,
    help="Output flow files transferred to any relationship.",
)
@click.option(
    "-no-success",
    "no_success",
    is_flag=True,
    default=False,
    help="Do not output flow files transferred to the success relationship.",
)
@click.option(
    "-prop",
    "properties",
    multiple=True,
    metavar="NAME=VALUE",
    help="Script variable available to the script. Can be repeated.",
)
def script_runner(  # noqa: PLR0913
    script_path: Path,
    output_attributes: bool,
    output_content: bool,
    attr_file: str,
    module_paths: str,
    input_dir: str,
    output_failure: bool,
    output_success: bool,
    all_output: bool,
    all_relationships: bool,
    no_success: bool,
    properties: tuple[str, ...],
) -> None:
    """Run SCRIPT against flow files read from stdin or an input directory."""

    settings = Settings.from_env()
    try:
        settings.validate()
    except ValueError as error:
        raise _fatal(InvalidConfigurationError(str(error))) from error
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    command = ScriptRunCommand(
        script_path=script_path,
        options=OutputOptions.resolve(
            attributes=output_attributes,
            content=output_content,
            success=output_success,
            failure=output_failure,
            all_output=all_output,
            all_relationships=all_relationships,
            no_success=no_success,
        ),
        attr_file=attr_file,
        module_paths=module_paths,
        input_dir=input_dir,
        properties=properties,
    )
    try:
        report = ScriptRunnerController(settings).run(
            command,
            stdin=sys.stdin.buffer,
        )
    except RunConfigurationError as error:
        raise _fatal(error) from error
    _emit_lines(report.lines)


def _fatal(error: RunConfigurationError) -> click.ClickException:
    exception = click.ClickException(error.message)
    exception.exit_code = int(error.exit_code)
    return exception


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    script_runner()
