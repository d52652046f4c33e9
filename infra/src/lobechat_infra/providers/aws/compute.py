"""AWS Lambda implementation of LobechatCompute."""

from __future__ import annotations

import json
import logging

import pulumi
import pulumi_aws as aws
import pulumi_random as random

from lobechat_infra.components.compute import ComputeOutputs
from lobechat_infra.components.database import DatabaseOutputs
from lobechat_infra.providers.aws.functions import (
    PYTHON_RUNTIME,
    allow_postgres_from,
    lambda_role,
    package_archive,
)

logger: logging.Logger = logging.getLogger(__name__)

_HANDLER = "lobechat_infra.app_function.handler"


class AwsComputeArgs:
    """Arguments for the AWS app compute component."""

    def __init__(
        self,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        database: DatabaseOutputs,
        database_url: pulumi.Input[str],
        app_url: str,
        next_auth_sso_providers: str = "",
        layer_arns: list[str] | None = None,
        permissions_boundary: pulumi.Input[str] | None = None,
    ) -> None:
        self.vpc_id: pulumi.Input[str] = vpc_id
        self.subnet_ids: list[pulumi.Input[str]] = subnet_ids
        self.database: DatabaseOutputs = database
        self.database_url: pulumi.Input[str] = database_url
        self.app_url: str = app_url.rstrip("/")
        self.next_auth_sso_providers: str = next_auth_sso_providers
        self.layer_arns: list[str] = list(layer_arns or [])
        self.permissions_boundary: pulumi.Input[str] | None = permissions_boundary

    @property
    def next_auth_url(self) -> str:
        return f"{self.app_url}/api/auth"


class AwsCompute(pulumi.ComponentResource):
    """AWS Lambda app function satisfying ``LobechatCompute``.

    Provisions the app secrets (``KEY_VAULTS_SECRET``, ``NEXT_AUTH_SECRET``),
    an execution role, a security group with database access, and the app
    function. ``DATABASE_URL`` is injected at deploy time from the bootstrap
    result, so the function makes no Secrets Manager call for it at runtime.
    """

    def __init__(
        self,
        name: str,
        args: AwsComputeArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("lobechat:aws:Compute", name, {}, opts)

        logger.debug("provisioning_aws_compute", extra={"name": name, "app_url": args.app_url})

        key_vaults_secret = self._generated_secret(
            f"{name}-key-vaults", "LobeChat KEY_VAULTS_SECRET"
        )
        next_auth_secret = self._generated_secret(
            f"{name}-next-auth", "LobeChat NEXT_AUTH_SECRET"
        )

        security_group = aws.ec2.SecurityGroup(
            f"{name}-sg",
            aws.ec2.SecurityGroupArgs(
                vpc_id=args.vpc_id,
                description="Lambda SG for the LobeChat app",
                egress=[
                    aws.ec2.SecurityGroupEgressArgs(
                        protocol="-1", from_port=0, to_port=0, cidr_blocks=["0.0.0.0/0"]
                    )
                ],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        allow_postgres_from(
            name,
            self,
            database_security_group_id=args.database.security_group_id,
            source_security_group_id=security_group.id,
            description="App Lambda to Postgres",
        )

        role = lambda_role(name, self, args.permissions_boundary)

        secrets_policy = aws.iam.RolePolicy(
            f"{name}-secrets",
            aws.iam.RolePolicyArgs(
                role=role.id,
                policy=pulumi.Output.all(key_vaults_secret.arn, next_auth_secret.arn).apply(
                    lambda arns: json.dumps(
                        {
                            "Version": "2012-10-17",
                            "Statement": [
                                {
                                    "Effect": "Allow",
                                    "Action": "secretsmanager:GetSecretValue",
                                    "Resource": list(arns),
                                }
                            ],
                        }
                    )
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        function = aws.lambda_.Function(
            f"{name}-fn",
            aws.lambda_.FunctionArgs(
                runtime=PYTHON_RUNTIME,
                handler=_HANDLER,
                code=package_archive(),
                role=role.arn,
                timeout=29,
                memory_size=512,
                layers=args.layer_arns,
                vpc_config=aws.lambda_.FunctionVpcConfigArgs(
                    subnet_ids=args.subnet_ids,
                    security_group_ids=[security_group.id],
                ),
                environment=aws.lambda_.FunctionEnvironmentArgs(
                    variables={
                        "DATABASE_URL": args.database_url,
                        "NEXT_AUTH_SSO_PROVIDERS": args.next_auth_sso_providers,
                        "KEY_VAULTS_SECRET_ARN": key_vaults_secret.arn,
                        "NEXT_AUTH_SECRET_ARN": next_auth_secret.arn,
                        "APP_URL": args.app_url,
                        "NEXTAUTH_URL": args.next_auth_url,
                    }
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[secrets_policy]),
        )

        self._outputs: ComputeOutputs = ComputeOutputs(
            function_name=function.name,
            invoke_arn=function.invoke_arn,
            key_vaults_secret_arn=key_vaults_secret.arn,
            next_auth_secret_arn=next_auth_secret.arn,
        )

        self.register_outputs(
            {
                "function_name": self._outputs.function_name,
                "invoke_arn": self._outputs.invoke_arn,
                "key_vaults_secret_arn": self._outputs.key_vaults_secret_arn,
                "next_auth_secret_arn": self._outputs.next_auth_secret_arn,
            }
        )

    def _generated_secret(self, name: str, description: str) -> aws.secretsmanager.Secret:
        value = random.RandomPassword(
            f"{name}-gen",
            random.RandomPasswordArgs(length=44, special=False),
            opts=pulumi.ResourceOptions(parent=self),
        )
        secret = aws.secretsmanager.Secret(
            name,
            aws.secretsmanager.SecretArgs(description=description),
            opts=pulumi.ResourceOptions(parent=self),
        )
        aws.secretsmanager.SecretVersion(
            f"{name}-version",
            aws.secretsmanager.SecretVersionArgs(secret_id=secret.id, secret_string=value.result),
            opts=pulumi.ResourceOptions(parent=self),
        )
        return secret

    @property
    def outputs(self) -> ComputeOutputs:
        """Return the resolved compute outputs."""
        return self._outputs
