"""Command handler for the CLI build operation."""

from typing import BinaryIO, Optional

from blockmap.config import ChunkerConfig, CompressionFormat, OutputTarget
from blockmap.models import InputFileInfo
from blockmap.pipeline import build_block_map
from cli.models import BuildCommand
from cli.utils import format_file_size
from common.logging_config import get_logger

logger = get_logger(__name__)


def resolve_chunker_config(cmd: BuildCommand) -> ChunkerConfig:
    """
    Overlay the command's size flags on the environment defaults.

    Args:
        cmd: Parsed build command

    Returns:
        Validated ChunkerConfig

    Raises:
        ConfigError: If the resulting bounds are invalid
    """
    defaults = ChunkerConfig.default()
    return ChunkerConfig(
        window=cmd.window if cmd.window is not None else defaults.window,
        min=cmd.min if cmd.min is not None else defaults.min,
        avg=cmd.avg if cmd.avg is not None else defaults.avg,
        max=cmd.max if cmd.max is not None else defaults.max,
    )


def resolve_output(cmd: BuildCommand) -> OutputTarget:
    """Map -append / -out onto an OutputTarget; no -out means stdout."""
    if cmd.append:
        return OutputTarget.append()
    if cmd.out_file is None:
        return OutputTarget.stdout()
    return OutputTarget.to_path(cmd.out_file)


def handle_build(cmd: BuildCommand, stdout: Optional[BinaryIO] = None) -> InputFileInfo:
    """
    Handle the build command.

    Configuration is resolved and validated before the input is opened.

    Args:
        cmd: BuildCommand with input, output and chunker flags
        stdout: Binary stream standing in for stdout (testing)

    Returns:
        InputFileInfo of the final artifact

    Raises:
        BlockMapError: If configuration, IO or encoding fails
    """
    compression_format = CompressionFormat.from_name(cmd.compression)
    chunker_config = resolve_chunker_config(cmd)
    output = resolve_output(cmd)

    logger.info(
        f"Executing build: in={cmd.in_file} output={output.kind.value} "
        f"compression={compression_format.value}"
    )
    info = build_block_map(
        cmd.in_file,
        chunker_config=chunker_config,
        compression_format=compression_format,
        output=output,
        stdout=stdout,
    )

    summary = f"Built block map for {cmd.in_file}: artifact {format_file_size(info.size)}"
    if info.block_map_size is not None:
        summary += f", trailer {format_file_size(info.block_map_size)}"
    logger.info(summary)
    return info
