"""AWS API Gateway + Route 53 implementation of LobechatRouting."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Callable
from typing import Any

import pulumi
import pulumi_aws as aws

from lobechat_infra.components.routing import RoutingOutputs

logger: logging.Logger = logging.getLogger(__name__)


def _validation_field(key: str) -> Callable[[list[Any]], str]:
    return lambda options: options[0][key]


class AwsRoutingArgs:
    """Arguments for the AWS routing component.

    Args:
        function_name: Name of the function every request is proxied to.
        invoke_arn: Invoke ARN of that function.
        root_domain: Route 53 hosted zone to publish under. Empty to serve
            from the default ``execute-api`` URL only.
        subdomain: Record name within ``root_domain``.
        stage_name: API Gateway stage name.
    """

    def __init__(
        self,
        function_name: pulumi.Input[str],
        invoke_arn: pulumi.Input[str],
        root_domain: str = "",
        subdomain: str = "lobechat",
        stage_name: str = "prod",
    ) -> None:
        self.function_name: pulumi.Input[str] = function_name
        self.invoke_arn: pulumi.Input[str] = invoke_arn
        self.root_domain: str = root_domain
        self.subdomain: str = subdomain
        self.stage_name: str = stage_name

    @property
    def domain_name(self) -> str:
        return f"{self.subdomain}.{self.root_domain}" if self.root_domain else ""


class AwsRouting(pulumi.ComponentResource):
    """Regional REST API proxying to the app function, satisfying ``LobechatRouting``.

    With a root domain, also provisions a DNS-validated ACM certificate, an
    API Gateway custom domain (TLS 1.2), a base path mapping, and a Route 53
    alias record.
    """

    def __init__(
        self,
        name: str,
        args: AwsRoutingArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("lobechat:aws:Routing", name, {}, opts)

        logger.debug(
            "provisioning_aws_routing",
            extra={"name": name, "domain_name": args.domain_name},
        )

        api = aws.apigateway.RestApi(
            f"{name}-api",
            aws.apigateway.RestApiArgs(
                description="LobeChat API",
                endpoint_configuration=aws.apigateway.RestApiEndpointConfigurationArgs(
                    types="REGIONAL",
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        proxy = aws.apigateway.Resource(
            f"{name}-proxy",
            aws.apigateway.ResourceArgs(
                rest_api=api.id,
                parent_id=api.root_resource_id,
                path_part="{proxy+}",
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        integrations: list[aws.apigateway.Integration] = []
        for suffix, resource_id in (("root", api.root_resource_id), ("proxy", proxy.id)):
            method = aws.apigateway.Method(
                f"{name}-{suffix}-any",
                aws.apigateway.MethodArgs(
                    rest_api=api.id,
                    resource_id=resource_id,
                    http_method="ANY",
                    authorization="NONE",
                ),
                opts=pulumi.ResourceOptions(parent=self),
            )
            integrations.append(
                aws.apigateway.Integration(
                    f"{name}-{suffix}-integration",
                    aws.apigateway.IntegrationArgs(
                        rest_api=api.id,
                        resource_id=resource_id,
                        http_method=method.http_method,
                        integration_http_method="POST",
                        type="AWS_PROXY",
                        uri=args.invoke_arn,
                    ),
                    opts=pulumi.ResourceOptions(parent=self),
                )
            )

        deployment = aws.apigateway.Deployment(
            f"{name}-deployment",
            aws.apigateway.DeploymentArgs(
                rest_api=api.id,
                triggers={
                    "redeployment": pulumi.Output.all(
                        proxy.id, *[integration.id for integration in integrations]
                    ).apply(lambda ids: hashlib.sha1(json.dumps(ids).encode()).hexdigest())
                },
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=integrations),
        )

        stage = aws.apigateway.Stage(
            f"{name}-stage",
            aws.apigateway.StageArgs(
                rest_api=api.id,
                deployment=deployment.id,
                stage_name=args.stage_name,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        aws.lambda_.Permission(
            f"{name}-invoke",
            aws.lambda_.PermissionArgs(
                action="lambda:InvokeFunction",
                function=args.function_name,
                principal="apigateway.amazonaws.com",
                source_arn=api.execution_arn.apply(lambda arn: f"{arn}/*/*"),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        certificate_arn: pulumi.Output[str] | None = None
        if args.domain_name:
            certificate_arn = self._custom_domain(name, args, api, stage)
            app_url: pulumi.Output[str] = pulumi.Output.from_input(f"https://{args.domain_name}")
        else:
            app_url = stage.invoke_url.apply(lambda url: url.rstrip("/"))

        self._outputs: RoutingOutputs = RoutingOutputs(
            app_url=app_url,
            api_id=api.id,
            stage_invoke_url=stage.invoke_url,
            certificate_arn=certificate_arn,
        )

        self.register_outputs(
            {
                "app_url": self._outputs.app_url,
                "api_id": self._outputs.api_id,
                "stage_invoke_url": self._outputs.stage_invoke_url,
            }
        )

    @property
    def outputs(self) -> RoutingOutputs:
        """Return the resolved routing outputs."""
        return self._outputs

    def _custom_domain(
        self,
        name: str,
        args: AwsRoutingArgs,
        api: aws.apigateway.RestApi,
        stage: aws.apigateway.Stage,
    ) -> pulumi.Output[str]:
        zone = aws.route53.get_zone_output(
            name=args.root_domain,
            private_zone=False,
            opts=pulumi.InvokeOptions(parent=self),
        )

        certificate = aws.acm.Certificate(
            f"{name}-cert",
            aws.acm.CertificateArgs(domain_name=args.domain_name, validation_method="DNS"),
            opts=pulumi.ResourceOptions(parent=self),
        )

        options = certificate.domain_validation_options
        validation_record = aws.route53.Record(
            f"{name}-cert-validation",
            aws.route53.RecordArgs(
                zone_id=zone.zone_id,
                name=options.apply(_validation_field("resource_record_name")),
                type=options.apply(_validation_field("resource_record_type")),
                records=[options.apply(_validation_field("resource_record_value"))],
                ttl=60,
                allow_overwrite=True,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        validation = aws.acm.CertificateValidation(
            f"{name}-cert-validated",
            aws.acm.CertificateValidationArgs(
                certificate_arn=certificate.arn,
                validation_record_fqdns=[validation_record.fqdn],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        domain = aws.apigateway.DomainName(
            f"{name}-domain",
            aws.apigateway.DomainNameArgs(
                domain_name=args.domain_name,
                regional_certificate_arn=validation.certificate_arn,
                endpoint_configuration=aws.apigateway.DomainNameEndpointConfigurationArgs(
                    types="REGIONAL",
                ),
                security_policy="TLS_1_2",
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        aws.apigateway.BasePathMapping(
            f"{name}-mapping",
            aws.apigateway.BasePathMappingArgs(
                rest_api=api.id,
                stage_name=stage.stage_name,
                domain_name=domain.domain_name,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        aws.route53.Record(
            f"{name}-alias",
            aws.route53.RecordArgs(
                zone_id=zone.zone_id,
                name=args.domain_name,
                type="A",
                aliases=[
                    aws.route53.RecordAliasArgs(
                        name=domain.regional_domain_name,
                        zone_id=domain.regional_zone_id,
                        evaluate_target_health=False,
                    )
                ],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        return validation.certificate_arn
