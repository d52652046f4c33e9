"""Unit tests for the AWS routing component using Pulumi mocks."""
from __future__ import annotations

import pulumi
from pulumi.runtime import Mocks

from lobechat_infra.providers.aws.routing import AwsRouting, AwsRoutingArgs

_INVOKE_ARN = (
    "arn:aws:apigateway:us-west-2:lambda:path/2015-03-31/functions/"
    "arn:aws:lambda:us-west-2:123456789012:function:lobechat-app-fn/invocations"
)


class LobechatMocks(Mocks):
    def __init__(self) -> None:
        self.resources: dict[str, tuple[str, dict[str, object]]] = {}

    def new_resource(
        self, args: pulumi.runtime.MockResourceArgs
    ) -> tuple[str, dict[str, object]]:
        self.resources[args.name] = (args.typ, dict(args.inputs))
        outputs: dict[str, object] = dict(args.inputs)
        outputs.setdefault("arn", f"arn:aws:mock:us-west-2:123456789012:{args.name}")
        if args.typ == "aws:apigateway/restApi:RestApi":
            outputs["rootResourceId"] = "root-id"
            outputs["executionArn"] = "arn:aws:execute-api:us-west-2:123456789012:api123"
        if args.typ == "aws:apigateway/stage:Stage":
            outputs["invokeUrl"] = "https://api123.execute-api.us-west-2.amazonaws.com/prod/"
        if args.typ == "aws:acm/certificate:Certificate":
            outputs["domainValidationOptions"] = [
                {
                    "domainName": args.inputs.get("domainName", ""),
                    "resourceRecordName": "_mock.lobechat.example.com.",
                    "resourceRecordType": "CNAME",
                    "resourceRecordValue": "_mock.acm-validations.aws.",
                }
            ]
        if args.typ == "aws:route53/record:Record":
            outputs["fqdn"] = str(args.inputs.get("name", ""))
        if args.typ == "aws:apigateway/domainName:DomainName":
            outputs["regionalDomainName"] = "d-mock.execute-api.us-west-2.amazonaws.com"
            outputs["regionalZoneId"] = "ZREGIONAL"
        return (f"{args.name}-id", outputs)

    def call(
        self, args: pulumi.runtime.MockCallArgs
    ) -> tuple[dict[str, object], list[tuple[str, str]]]:
        if args.token == "aws:route53/getZone:getZone":
            return ({"zoneId": "ZEXAMPLE", "name": args.args.get("name", "")}, [])
        return ({}, [])


pulumi.runtime.set_mocks(LobechatMocks(), preview=False)


def _args(**overrides: object) -> AwsRoutingArgs:
    values: dict[str, object] = {
        "function_name": "lobechat-app-fn",
        "invoke_arn": _INVOKE_ARN,
    }
    values.update(overrides)
    return AwsRoutingArgs(**values)  # type: ignore[arg-type]


def test_routing_args_domain_name() -> None:
    assert _args(root_domain="example.com").domain_name == "lobechat.example.com"
    assert _args(root_domain="example.com", subdomain="chat").domain_name == "chat.example.com"
    assert _args().domain_name == ""


@pulumi.runtime.test
def test_routing_without_domain_serves_stage_url() -> None:
    pulumi.runtime.set_mocks(LobechatMocks(), preview=False)
    routing = AwsRouting("test-api", _args())
    assert routing.outputs.certificate_arn is None

    def check(url: str) -> None:
        assert url == "https://api123.execute-api.us-west-2.amazonaws.com/prod"

    return routing.outputs.app_url.apply(check)


@pulumi.runtime.test
def test_routing_with_domain_serves_custom_domain() -> None:
    pulumi.runtime.set_mocks(LobechatMocks(), preview=False)
    routing = AwsRouting("test-api2", _args(root_domain="example.com"))

    def check(url: str) -> None:
        assert url == "https://lobechat.example.com"

    return routing.outputs.app_url.apply(check)


@pulumi.runtime.test
def test_routing_certificate_is_dns_validated_in_zone() -> None:
    mocks = LobechatMocks()
    pulumi.runtime.set_mocks(mocks, preview=False)
    routing = AwsRouting("test-api3", _args(root_domain="example.com"))
    assert routing.outputs.certificate_arn is not None

    def check(certificate_arn: str) -> None:
        assert certificate_arn == "arn:aws:mock:us-west-2:123456789012:test-api3-cert"
        _, certificate = mocks.resources["test-api3-cert"]
        assert certificate["domainName"] == "lobechat.example.com"
        assert certificate["validationMethod"] == "DNS"
        _, record = mocks.resources["test-api3-cert-validation"]
        assert record["zoneId"] == "ZEXAMPLE"
        assert record["name"] == "_mock.lobechat.example.com."
        assert record["type"] == "CNAME"
        assert record["records"] == ["_mock.acm-validations.aws."]

    return routing.outputs.certificate_arn.apply(check)


@pulumi.runtime.test
def test_routing_proxies_root_and_catch_all_to_function() -> None:
    mocks = LobechatMocks()
    pulumi.runtime.set_mocks(mocks, preview=False)
    routing = AwsRouting("test-api4", _args())

    def check(_: str) -> None:
        for suffix in ("root", "proxy"):
            typ, inputs = mocks.resources[f"test-api4-{suffix}-integration"]
            assert typ == "aws:apigateway/integration:Integration"
            assert inputs["type"] == "AWS_PROXY"
            assert inputs["integrationHttpMethod"] == "POST"
            assert inputs["uri"] == _INVOKE_ARN
        _, proxy = mocks.resources["test-api4-proxy"]
        assert proxy["pathPart"] == "{proxy+}"

    return routing.outputs.stage_invoke_url.apply(check)
