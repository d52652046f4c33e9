"""AWS Lambda implementation of LobechatDbInit."""

from __future__ import annotations

import json
import logging
from typing import Any

import pulumi
import pulumi_aws as aws

from lobechat_infra.components.database import DatabaseOutputs
from lobechat_infra.components.db_init import DbInitOutputs
from lobechat_infra.providers.aws.functions import (
    PYTHON_RUNTIME,
    allow_postgres_from,
    lambda_role,
    package_archive,
)

logger: logging.Logger = logging.getLogger(__name__)

_HANDLER = "lobechat_infra.db_init.handler.handler"


def _database_url(result: str) -> str:
    """Pull ``Data.DatabaseUrl`` out of the bootstrap function's response."""
    return str(json.loads(result)["Data"]["DatabaseUrl"])


def _invocation_input(values: list[Any]) -> str:
    secret_arn, host, port, database_name, url_secret_arn = values
    return json.dumps(
        {
            "ResourceProperties": {
                "DbSecretArn": secret_arn,
                "DbHost": host,
                "DbPort": str(port),
                "DbName": database_name,
                "DatabaseUrlSecretArn": url_secret_arn,
            }
        }
    )


class AwsDbInitArgs:
    """Arguments for the AWS database bootstrap component.

    Args:
        vpc_id: ID of the VPC the function runs in.
        subnet_ids: Private subnets with egress, needed to reach Secrets Manager.
        database: Outputs of the database to bootstrap.
        depends_on: Resources that must exist before the first invocation,
            typically the cluster's writer instance.
        layer_arns: Lambda layers supplying the function's dependencies.
        permissions_boundary: Optional IAM permissions boundary ARN.
        retain_logs: Keep the log group when the stack is destroyed.
    """

    def __init__(
        self,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        database: DatabaseOutputs,
        depends_on: list[pulumi.Resource] | None = None,
        layer_arns: list[str] | None = None,
        permissions_boundary: pulumi.Input[str] | None = None,
        retain_logs: bool = False,
    ) -> None:
        self.vpc_id: pulumi.Input[str] = vpc_id
        self.subnet_ids: list[pulumi.Input[str]] = subnet_ids
        self.database: DatabaseOutputs = database
        self.depends_on: list[pulumi.Resource] = list(depends_on or [])
        self.layer_arns: list[str] = list(layer_arns or [])
        self.permissions_boundary: pulumi.Input[str] | None = permissions_boundary
        self.retain_logs: bool = retain_logs


class AwsDbInit(pulumi.ComponentResource):
    """Bootstrap function plus its lifecycle invocation, satisfying ``LobechatDbInit``.

    The function enables pgvector and writes ``DATABASE_URL``. It is invoked
    on create, update and delete of the invocation resource, so changing any
    database property re-runs the bootstrap in place.
    """

    def __init__(
        self,
        name: str,
        args: AwsDbInitArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """Initialise and provision the bootstrap component.

        Args:
            name: Logical Pulumi resource name.
            args: AWS-specific bootstrap arguments.
            opts: Optional Pulumi resource options.
        """
        super().__init__("lobechat:aws:DbInit", name, {}, opts)

        logger.debug("provisioning_aws_db_init", extra={"name": name})
        database = args.database

        security_group = aws.ec2.SecurityGroup(
            f"{name}-sg",
            aws.ec2.SecurityGroupArgs(
                vpc_id=args.vpc_id,
                description="Lambda SG for DB init",
                egress=[
                    aws.ec2.SecurityGroupEgressArgs(
                        protocol="-1", from_port=0, to_port=0, cidr_blocks=["0.0.0.0/0"]
                    )
                ],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        log_group = aws.cloudwatch.LogGroup(
            f"{name}-logs",
            aws.cloudwatch.LogGroupArgs(retention_in_days=7),
            opts=pulumi.ResourceOptions(parent=self, retain_on_delete=args.retain_logs),
        )

        role = lambda_role(name, self, args.permissions_boundary)

        secrets_policy = aws.iam.RolePolicy(
            f"{name}-secrets",
            aws.iam.RolePolicyArgs(
                role=role.id,
                policy=pulumi.Output.all(
                    database.credentials_secret_arn, database.database_url_secret_arn
                ).apply(
                    lambda arns: json.dumps(
                        {
                            "Version": "2012-10-17",
                            "Statement": [
                                {
                                    "Effect": "Allow",
                                    "Action": [
                                        "secretsmanager:GetSecretValue",
                                        "secretsmanager:DescribeSecret",
                                    ],
                                    "Resource": arns[0],
                                },
                                {
                                    "Effect": "Allow",
                                    "Action": "secretsmanager:PutSecretValue",
                                    "Resource": arns[1],
                                },
                            ],
                        }
                    )
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        ingress = allow_postgres_from(
            name,
            self,
            database_security_group_id=database.security_group_id,
            source_security_group_id=security_group.id,
            description="Allow Lambda to connect to Postgres",
        )

        function = aws.lambda_.Function(
            f"{name}-fn",
            aws.lambda_.FunctionArgs(
                runtime=PYTHON_RUNTIME,
                handler=_HANDLER,
                code=package_archive(),
                role=role.arn,
                timeout=120,
                memory_size=256,
                layers=args.layer_arns,
                vpc_config=aws.lambda_.FunctionVpcConfigArgs(
                    subnet_ids=args.subnet_ids,
                    security_group_ids=[security_group.id],
                ),
                environment=aws.lambda_.FunctionEnvironmentArgs(
                    variables={
                        "DB_SECRET_ARN": database.credentials_secret_arn,
                        "DB_HOST": database.host,
                        "DB_PORT": database.port.apply(str),
                        "DB_NAME": database.database_name,
                        "DATABASE_URL_SECRET_ARN": database.database_url_secret_arn,
                    }
                ),
                logging_config=aws.lambda_.FunctionLoggingConfigArgs(
                    log_format="Text",
                    log_group=log_group.name,
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        invocation = aws.lambda_.Invocation(
            f"{name}-invocation",
            aws.lambda_.InvocationArgs(
                function_name=function.name,
                input=pulumi.Output.all(
                    database.credentials_secret_arn,
                    database.host,
                    database.port,
                    database.database_name,
                    database.database_url_secret_arn,
                ).apply(_invocation_input),
                lifecycle_scope="CRUD",
            ),
            opts=pulumi.ResourceOptions(
                parent=self,
                depends_on=[secrets_policy, ingress, *args.depends_on],
                additional_secret_outputs=["result"],
            ),
        )

        self._outputs: DbInitOutputs = DbInitOutputs(
            database_url=pulumi.Output.secret(invocation.result.apply(_database_url)),
            function_name=function.name,
        )

        self.register_outputs(
            {
                "database_url": self._outputs.database_url,
                "function_name": self._outputs.function_name,
            }
        )

    @property
    def outputs(self) -> DbInitOutputs:
        """Return the resolved bootstrap outputs."""
        return self._outputs
