"""Pulumi stack entry point for LobeChat infrastructure."""

from __future__ import annotations

import logging

import pulumi
import structlog

from lobechat_infra.config import CloudProvider, StackConfig
from lobechat_infra.providers.aws.compute import AwsCompute, AwsComputeArgs
from lobechat_infra.providers.aws.database import AwsDatabase, AwsDatabaseArgs
from lobechat_infra.providers.aws.db_init import AwsDbInit, AwsDbInitArgs
from lobechat_infra.providers.aws.functions import permissions_boundary_arn
from lobechat_infra.providers.aws.network import AwsNetwork, AwsNetworkArgs
from lobechat_infra.providers.aws.routing import AwsRouting, AwsRoutingArgs

logger: logging.Logger = logging.getLogger(__name__)


class LobechatStack:
    """Orchestrates all provider-agnostic infrastructure components."""

    def __init__(self, config: StackConfig) -> None:
        """Initialise the stack with resolved configuration."""
        self._config: StackConfig = config

    def run(self) -> None:
        """Provision the full infrastructure stack."""
        logger.info(
            "stack_run_started",
            extra={"cloud_provider": self._config.cloud_provider.value, "stage": self._config.stage},
        )
        if self._config.cloud_provider == CloudProvider.AWS:
            self._run_aws()
        else:
            raise NotImplementedError(
                f"Provider '{self._config.cloud_provider}' not yet implemented."
            )

    def _run_aws(self) -> None:
        config = self._config
        boundary = permissions_boundary_arn(config.permissions_boundary_name)

        network = AwsNetwork("lobechat-network", AwsNetworkArgs(region=config.region))
        database = AwsDatabase(
            "lobechat-db",
            AwsDatabaseArgs(
                vpc_id=network.outputs.vpc_id,
                subnet_ids=list(network.outputs.isolated_subnet_ids),
                database_name=config.db_name,
                retain_on_delete=config.retain_on_delete,
            ),
        )
        db_init = AwsDbInit(
            "lobechat-pgvector-init",
            AwsDbInitArgs(
                vpc_id=network.outputs.vpc_id,
                subnet_ids=list(network.outputs.egress_subnet_ids),
                database=database.outputs,
                depends_on=[database.writer],
                layer_arns=config.function_layer_arns,
                permissions_boundary=boundary,
                retain_logs=config.retain_on_delete,
            ),
        )
        app_url = f"https://{config.domain_name}"
        compute = AwsCompute(
            "lobechat-app",
            AwsComputeArgs(
                vpc_id=network.outputs.vpc_id,
                subnet_ids=list(network.outputs.egress_subnet_ids),
                database=database.outputs,
                database_url=db_init.outputs.database_url,
                app_url=app_url,
                next_auth_sso_providers=config.next_auth_sso_providers,
                layer_arns=config.function_layer_arns,
                permissions_boundary=boundary,
            ),
        )
        routing = AwsRouting(
            "lobechat-api",
            AwsRoutingArgs(
                function_name=compute.outputs.function_name,
                invoke_arn=compute.outputs.invoke_arn,
                root_domain=config.root_domain,
                subdomain=config.subdomain,
            ),
        )

        pulumi.export("lobechat_url", routing.outputs.app_url)
        pulumi.export("database_endpoint", database.outputs.endpoint)
        pulumi.export("database_secret_arn", database.outputs.credentials_secret_arn)
        pulumi.export("database_url_secret_arn", database.outputs.database_url_secret_arn)
        pulumi.export("next_auth_secret_arn", compute.outputs.next_auth_secret_arn)
        pulumi.export("key_vaults_secret_arn", compute.outputs.key_vaults_secret_arn)


if __name__ == "__main__":
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
    LobechatStack(config=StackConfig.load()).run()
