"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service,
or runs one form identifier lookup from the command line.
"""

import argparse
import json
import logging

import uvicorn

from jdy_bridge.bootstrap import bootstrap_create_application, bootstrap_create_form_resolver
from jdy_bridge.config import config_load_settings
from jdy_bridge.resolution import FormResolutionError, MetadataUnavailableError


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="JianDaoYun form bridge runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "resolve-form"),
        help="Runtime command: `api` starts server, `resolve-form` resolves one form identifier",
        type=str,
    )
    argument_parser.add_argument(
        "identifier",
        nargs="?",
        type=str,
        help="Form handle or application id for `resolve-form`",
    )
    argument_parser.add_argument(
        "--app-key",
        dest="app_key",
        type=str,
        help="Optional API key override for `resolve-form`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_arguments.command == "resolve-form":
        if not parsed_arguments.identifier:
            argument_parser.error("resolve-form requires IDENTIFIER")
        app_key = parsed_arguments.app_key or settings.jiandaoyun_app_key
        if not app_key:
            argument_parser.error("an API key is required: set JIANDAOYUN_APP_KEY or pass --app-key")
        form_resolver = bootstrap_create_form_resolver(settings=settings)
        try:
            resolved_form = form_resolver.resolver_resolve_form(
                identifier=parsed_arguments.identifier,
                app_key=app_key,
            )
        except (FormResolutionError, MetadataUnavailableError) as error:
            print(json.dumps({"status": "error", "message": str(error)}, ensure_ascii=False))
            raise SystemExit(1) from error
        print(
            json.dumps(
                {
                    "form_handle": resolved_form.form_handle,
                    "application_id": resolved_form.application_id,
                    "ambiguous_alternatives": list(resolved_form.ambiguous_alternatives or ()),
                },
                ensure_ascii=False,
            )
        )
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
