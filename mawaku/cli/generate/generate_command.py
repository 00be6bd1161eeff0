"""Turn a place description into a prompt, generate images and save them."""

import time
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from mawaku.cli.generate.logging_manager import LOG_DIR_NAME, StructuredLogger
from mawaku.cli.generate.spinner import run_with_spinner
from mawaku.core.config.store import (
    ConfigError,
    config_file_path,
    default_config,
    load_or_init,
    resolve_api_key,
    save,
)
from mawaku.core.environment import Environment, ProcessEnvironment
from mawaku.core.gemini.client import GeminiClient, GeminiError
from mawaku.core.image.save import ImageSaveError, SaveImageOptions, save_base64_image
from mawaku.core.naming import DEFAULT_FILE_NAME_PREFIX, ImageNameContext, trimmed_or_none
from mawaku.core.prompt import BASE_INSTRUCTIONS, build_structured_prompt, craft_prompt
from mawaku.core.shapes import Config, GeminiApiConfig, PlaceDescription, PredictResponse

@dataclass
class RunContext:
    prompt: str = ""
    infos: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    saved_paths: list[Path] = field(default_factory=list)


def _load_config(
    args, env: Environment, context: RunContext
) -> tuple[Config | None, Path | None]:
    try:
        outcome = load_or_init(env)
    except ConfigError as e:
        context.warnings.append(
            f"Warning: failed to load Mawaku configuration ({e}). Falling back to defaults."
        )
        if args.set_api_key_env_var is not None:
            context.warnings.append(
                "Warning: cannot update the API key variable because the configuration could not be loaded."
            )
        try:
            return default_config(config_file_path(env)), None
        except ConfigError:
            return None, None

    if outcome.created:
        context.infos.append(f"Created Mawaku configuration at {outcome.path}")
    elif outcome.migrations:
        context.infos.append(
            f"Migrated Mawaku configuration at {outcome.path} ({', '.join(outcome.migrations)})"
        )

    config = outcome.config
    if args.set_api_key_env_var is not None:
        config = config.model_copy(
            update={"gemini_api": GeminiApiConfig(api_key_env_var=args.set_api_key_env_var)}
        )
        try:
            save(config, outcome.path)
            context.infos.append(
                f"Updated API key variable to {config.gemini_api.api_key_env_var} in {outcome.path}"
            )
        except ConfigError as e:
            context.warnings.append(f"Warning: failed to update the API key variable ({e}).")

    return config, outcome.path


def _open_run_log(config_path: Path | None, context: RunContext) -> StructuredLogger | None:
    if config_path is None:
        return None
    try:
        return StructuredLogger(config_path.parent / LOG_DIR_NAME)
    except OSError as e:
        context.warnings.append(f"Warning: failed to open run log ({e}).")
        return None


def _fetch_place_description(
    client: GeminiClient,
    location: str,
    api_key: str,
    context: RunContext,
    run_log: StructuredLogger | None,
) -> PlaceDescription | None:
    try:
        description = client.generate_place_description(location, api_key)
    except GeminiError as e:
        context.warnings.append(f"Warning: failed to fetch place description ({e}).")
        if run_log:
            run_log.log_place_description("failed", str(e))
        return None

    if run_log:
        run_log.log_place_description("complete")
    return description


def _save_predictions(
    response: PredictResponse,
    names: ImageNameContext,
    output_dir: Path | None,
    context: RunContext,
    run_log: StructuredLogger | None,
) -> None:
    if not response.predictions:
        context.warnings.append("Warning: Gemini returned no images.")
        return

    for index, prediction in enumerate(response.predictions, start=1):
        if not prediction.bytes_base64_encoded:
            context.warnings.append(f"Warning: image {index} contained no image data.")
            continue

        options = SaveImageOptions(
            file_stem=names.file_stem(index),
            mime_type=prediction.mime_type,
            output_dir=output_dir,
        )
        try:
            path = save_base64_image(prediction.bytes_base64_encoded, options)
        except ImageSaveError as e:
            context.warnings.append(f"Warning: failed to save image {index} ({e}).")
            if run_log:
                run_log.log_image_error(index, type(e).__name__, str(e))
            continue

        context.saved_paths.append(path)
        context.infos.append(f"Saved image to {path}")
        if run_log:
            run_log.log_image_saved(index, str(path), prediction.mime_type)


def run(
    args,
    env: Environment | None = None,
    client: GeminiClient | None = None,
    console: Console | None = None,
) -> RunContext:
    """Execute one generation run. Failures become warnings on the returned context."""
    env = env or ProcessEnvironment()
    client = client or GeminiClient()
    console = console or Console(stderr=True)
    start_time = time.time()

    context = RunContext()
    location = args.location
    season = trimmed_or_none(args.season)
    time_of_day = trimmed_or_none(args.time_of_day)

    config, config_path = _load_config(args, env, context)
    run_log = _open_run_log(config_path, context)
    if run_log:
        run_log.log_run_start(location, season, time_of_day)

    gemini_api = config.gemini_api if config else GeminiApiConfig()
    api_key = resolve_api_key(gemini_api, env)
    if api_key is None:
        context.warnings.append(
            f"Warning: {gemini_api.api_key_env_var} is not set. "
            "Export it to enable place descriptions and image generation."
        )

    prompt = craft_prompt(BASE_INSTRUCTIONS, location, season, time_of_day)

    if api_key is not None:
        description = _fetch_place_description(client, location, api_key, context, run_log)
        if description is not None:
            prompt = build_structured_prompt(prompt, description, season, time_of_day)

        try:
            response = run_with_spinner(
                client.generate_image,
                api_key,
                prompt,
                message="Generating images with Gemini...",
                console=console,
            )
        except GeminiError as e:
            context.warnings.append(f"Warning: failed to generate images ({e}).")
            if run_log:
                run_log.log_image_error(None, type(e).__name__, str(e))
        else:
            names = ImageNameContext.from_components(
                DEFAULT_FILE_NAME_PREFIX, [location, season, time_of_day]
            )
            output_dir = Path(config.image_output_dir).expanduser() if config else None
            _save_predictions(response, names, output_dir, context, run_log)

    context.prompt = prompt

    if run_log:
        run_log.log_run_complete(
            saved_images=len(context.saved_paths),
            warnings=len(context.warnings),
            duration_s=time.time() - start_time,
        )
    return context


def generate_command(args) -> int:
    console = Console(stderr=True)
    context = run(args, console=console)

    for message in context.infos:
        console.print(message, markup=False, highlight=False, soft_wrap=True)

    for warning in context.warnings:
        console.print(warning, style="yellow", markup=False, highlight=False, soft_wrap=True)

    print(context.prompt)
    return 0
