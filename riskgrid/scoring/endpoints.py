"""
Scoring endpoint resolution.

production and dev map to fixed hosts; any other environment token becomes
the leading subdomain of the custom-environment host. All three share the
same pipeline-execution path.
"""

from __future__ import annotations

from riskgrid.config.env import get_pipeline_id
from riskgrid.config.settings import ENV_CUSTOM, ENV_DEV, ENV_PRODUCTION, ScoringSettings
from riskgrid.core.exceptions import UserInputError

PRODUCTION_HOST = "https://api.airia.ai"
DEV_HOST = "https://dev.api.airiadev.ai"
CUSTOM_HOST_TEMPLATE = "https://{token}.api.airia.ai"
PIPELINE_PATH_TEMPLATE = "/v2/PipelineExecution/{pipeline_id}"


def pipeline_path(pipeline_id: str | None = None) -> str:
    return PIPELINE_PATH_TEMPLATE.format(pipeline_id=pipeline_id or get_pipeline_id())


def resolve_endpoint(environment: str, pipeline_id: str | None = None) -> str:
    """
    Return the scoring URL for an environment name.

        resolve_endpoint("production") -> https://api.airia.ai/v2/PipelineExecution/<id>
        resolve_endpoint("acme")       -> https://acme.api.airia.ai/v2/PipelineExecution/<id>
    """
    token = (environment or "").strip()
    if not token:
        raise UserInputError("Please enter an environment name")
    if token == ENV_PRODUCTION:
        host = PRODUCTION_HOST
    elif token == ENV_DEV:
        host = DEV_HOST
    else:
        host = CUSTOM_HOST_TEMPLATE.format(token=token)
    return host + pipeline_path(pipeline_id)


def effective_environment(settings: ScoringSettings) -> str:
    """
    Environment name sent on the wire: the custom token when the selector is
    custom, otherwise the selector itself.
    """
    selector = (settings.environment or ENV_PRODUCTION).strip()
    if selector == ENV_CUSTOM:
        token = settings.custom_environment.strip()
        if not token:
            raise UserInputError("Please enter a custom environment name")
        return token
    return selector
