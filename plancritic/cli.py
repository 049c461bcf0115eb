"""
Command line interface for PlanCritic
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError as PydanticValidationError

from plancritic.agents.providers import resolve_provider
from plancritic.config.settings import Settings
from plancritic.exceptions import (
    AIProviderException,
    ConfigurationException,
    InputException,
    PlanCriticException,
    ReviewParseException,
    SchemaValidationException,
)
from plancritic.profiles import list_builtin
from plancritic.render import render_json, render_markdown, write_patch_file
from plancritic.services.review_service import (
    FAIL_ON_LEVELS,
    ReviewRequest,
    ReviewService,
    load_inputs,
    verdict_meets_threshold,
)
from plancritic.utils.version import get_version

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

EXIT_FAIL_ON = 2
EXIT_INPUT = 3
EXIT_PROVIDER = 4
EXIT_INVALID_OUTPUT = 5

OUTPUT_FORMATS = {"json": render_json, "md": render_markdown}


def _cli_version() -> str:
    try:
        return get_version()
    except (FileNotFoundError, ValueError):
        return "unknown"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, force=True)


def _load_settings() -> Settings:
    try:
        return Settings()
    except PydanticValidationError as e:
        raise ConfigurationException(
            message=f"invalid configuration: {e.error_count()} error(s)",
            details={"errors": [error["msg"] for error in e.errors()]},
            original_error=e,
        )


def _fail(ctx: click.Context, code: int, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(code)


@click.group(help="PlanCritic: review implementation plans with an LLM.")
@click.version_option(version=_cli_version(), prog_name="plancritic")
def cli():
    """Main entry point for the PlanCritic CLI"""


@cli.command("check")
@click.argument("plan_file", type=click.Path(dir_okay=False))
@click.option("--format", "output_format", default="json", show_default=True,
              help="Output format: json or md.")
@click.option("--out", type=click.Path(dir_okay=False), default=None,
              help="Output file path (default: stdout).")
@click.option("--context", "context_paths", multiple=True, type=click.Path(dir_okay=False),
              help="Context file path (may be repeated).")
@click.option("--profile", default="general", show_default=True, help="Profile name.")
@click.option("--strict", is_flag=True, default=False, help="Enable strict grounding mode.")
@click.option("--model", default=None,
              help="Model ID, e.g. claude-sonnet-4-6, gpt-4o or anthropic:<model>.")
@click.option("--max-tokens", type=int, default=None, help="Max response tokens [default: 4096].")
@click.option("--temperature", type=float, default=None, help="Model temperature [default: 0.2].")
@click.option("--seed", type=int, default=None, help="Random seed (if supported).")
@click.option("--severity-threshold", default="info", show_default=True,
              help="Minimum severity: info, warn, or critical.")
@click.option("--patch-out", type=click.Path(dir_okay=False), default=None,
              help="Write suggested patches as unified diff.")
@click.option("--fail-on", default=None,
              help="Exit 2 if the verdict meets this level: executable, "
                   "clarifications, not_executable or critical. Any other value "
                   "is an input error (exit 3).")
@click.option("--redact/--no-redact", default=True, show_default=True,
              help="Redact secrets before sending to the model.")
@click.option("--offline", is_flag=True, default=False,
              help="Fail if no model provider is configured.")
@click.option("--verbose", is_flag=True, default=False, help="Log processing steps to stderr.")
@click.option("--debug", is_flag=True, default=False,
              help="Save the prompt to plancritic-debug-prompt.txt.")
@click.pass_context
def check(
    ctx: click.Context,
    plan_file: str,
    output_format: str,
    out: Optional[str],
    context_paths: Tuple[str, ...],
    profile: str,
    strict: bool,
    model: Optional[str],
    max_tokens: Optional[int],
    temperature: Optional[float],
    seed: Optional[int],
    severity_threshold: str,
    patch_out: Optional[str],
    fail_on: Optional[str],
    redact: bool,
    offline: bool,
    verbose: bool,
    debug: bool,
):
    """Analyze a plan and produce a review"""
    try:
        settings = _load_settings()
    except ConfigurationException as e:
        _configure_logging("WARNING")
        _fail(ctx, EXIT_INPUT, str(e))
        return

    log_level = settings.log_level
    if verbose and log_level != "DEBUG":
        log_level = "INFO"
    _configure_logging(log_level)

    renderer = OUTPUT_FORMATS.get(output_format)
    if renderer is None:
        _fail(ctx, EXIT_INPUT, f"unknown format: {output_format}")
        return
    if fail_on and fail_on.lower() not in FAIL_ON_LEVELS:
        _fail(ctx, EXIT_INPUT, f"unrecognized --fail-on value {fail_on!r}")
        return

    model = model if model is not None else settings.ai_model
    request = ReviewRequest(
        plan_path=plan_file,
        context_paths=context_paths,
        profile=profile,
        strict=strict,
        model=model,
        temperature=temperature if temperature is not None else settings.ai_temperature,
        max_tokens=max_tokens if max_tokens is not None else settings.ai_max_tokens,
        seed=seed,
        timeout=settings.ai_request_timeout,
        severity_threshold=severity_threshold,
        redact=redact,
        debug=debug,
        max_issues=settings.max_issues,
        max_questions=settings.max_questions,
    )

    try:
        inputs = load_inputs(request)
    except InputException as e:
        _fail(ctx, EXIT_INPUT, str(e))
        return

    try:
        provider = resolve_provider(model, settings)
    except AIProviderException as e:
        prefix = "no model provider configured (--offline)" if offline else "model provider error"
        _fail(ctx, EXIT_PROVIDER, f"{prefix}: {e.message}")
        return
    logger.info(f"Using provider: {provider.name}")

    try:
        review = ReviewService(provider).review(request, inputs)
    except AIProviderException as e:
        _fail(ctx, EXIT_PROVIDER, f"LLM call failed: {e}")
        return
    except ReviewParseException as e:
        _fail(ctx, EXIT_INVALID_OUTPUT, f"failed to parse LLM response: {e.message}")
        return
    except SchemaValidationException as e:
        click.echo("Schema validation errors after repair:", err=True)
        for error in e.errors:
            click.echo(f"  {error}", err=True)
        _fail(ctx, EXIT_INVALID_OUTPUT, e.message)
        return
    except PlanCriticException as e:
        raise click.ClickException(str(e))

    output = renderer(review)
    try:
        if out:
            logger.info(f"Writing output to {out}")
            Path(out).write_text(output, encoding="utf-8")
        else:
            click.echo(output, nl=False)

        if patch_out:
            write_patch_file(review.patches, patch_out)
    except OSError as e:
        raise click.ClickException(f"failed to write output: {e}")
    except PlanCriticException as e:
        raise click.ClickException(e.message)

    if fail_on and verdict_meets_threshold(review.summary.verdict, fail_on):
        _fail(
            ctx,
            EXIT_FAIL_ON,
            f"verdict {review.summary.verdict} meets fail threshold {fail_on}",
        )


@cli.command("profiles")
def profiles():
    """List built-in review profiles"""
    for name in list_builtin():
        click.echo(name)


def main():
    cli(prog_name="plancritic")


if __name__ == "__main__":
    main()
