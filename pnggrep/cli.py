import json
import os
import re

import click

from . import __version__
from .errors import PngError
from .grep import compile_pattern, grep_file
from .logger import error
from .png import decode_file

JSON_ENV = os.environ.get("PNGGREP_JSON", "0").lower() in ("1", "true")

EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def output_result(result, json_output: bool):
    if json_output:
        if not isinstance(result, (dict, list)):
            result = {"result": result}
        click.echo(json.dumps(result, ensure_ascii=False))
    else:
        if isinstance(result, (dict, list)):
            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
        else:
            click.echo(result)


@click.group()
@click.option("--json", "json_output", is_flag=True, help="Return output in JSON format")
@click.version_option(__version__)
@click.pass_context
def cli(ctx, json_output):
    """Search and inspect PNG text metadata."""
    ctx.obj = {"json": json_output or JSON_ENV}


@cli.command()
@click.argument("pattern")
@click.argument("files", nargs=-1, required=True)
@click.option("-i", "ignore_case", is_flag=True, help="Make regexp case-insensitive")
@click.option("-w", "show_match", is_flag=True, help="Show matching text chunks")
@click.pass_context
def grep(ctx, pattern, files, ignore_case, show_match):
    """Print files whose tEXt chunks match PATTERN."""
    json_output = ctx.obj["json"]
    try:
        regex = compile_pattern(pattern, ignore_case)
    except re.error as e:
        error(f"Invalid regexp '{pattern}': {e}")
        ctx.exit(EXIT_ERROR)

    ret = EXIT_NO_MATCH
    found = []
    for filename in files:
        try:
            result = grep_file(filename, regex)
        except (OSError, PngError) as e:
            error(f"{filename}: {e}")
            ret = EXIT_ERROR
            break
        if result.found:
            found.append({"file": result.filename, "matches": result.matches})
            if not json_output:
                click.echo(result.filename)
                if show_match:
                    for m in result.matches:
                        click.echo(repr(m))
            ret = EXIT_MATCH

    if json_output:
        output_result(found, True)
    ctx.exit(ret)


@cli.command()
@click.argument("files", nargs=-1, required=True)
@click.pass_context
def info(ctx, files):
    """Show IHDR fields and chunk list of each file."""
    results = []
    for filename in files:
        try:
            png = decode_file(filename)
        except (OSError, PngError) as e:
            error(f"{filename}: {e}")
            ctx.exit(EXIT_ERROR)
        results.append({
            "file": filename,
            "width": png.width,
            "height": png.height,
            "bit_depth": png.bit_depth,
            "color_type": png.color_type,
            "compression": png.compression,
            "filter": png.filter_method,
            "interlace": png.interlace,
            "chunk_count": png.chunk_count,
            "chunks": [{"type": c.type_name, "length": c.length} for c in png.chunks],
        })
    output_result(results, ctx.obj["json"])

