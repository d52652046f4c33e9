"""Shared Lambda plumbing for the AWS function components."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pulumi
import pulumi_aws as aws

logger: logging.Logger = logging.getLogger(__name__)

PYTHON_RUNTIME = "python3.12"

# infra/src/lobechat_infra
_PACKAGE_DIR = Path(__file__).resolve().parents[2]

_VPC_ACCESS_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaVPCAccessExecutionRole"
)


def package_archive() -> pulumi.Archive:
    """Archive of the ``lobechat_infra`` package, importable from the Lambda root.

    Third-party runtime dependencies (psycopg, pydantic, structlog) come from
    the configured Lambda layers; boto3 ships with the runtime.
    """
    return pulumi.AssetArchive({"lobechat_infra": pulumi.FileArchive(str(_PACKAGE_DIR))})


def permissions_boundary_arn(policy_name: str) -> pulumi.Output[str] | None:
    """Resolve a customer-managed policy name to its ARN, if one is given."""
    if not policy_name:
        return None
    identity = aws.get_caller_identity_output()
    return identity.account_id.apply(lambda account: f"arn:aws:iam::{account}:policy/{policy_name}")


def lambda_role(
    name: str,
    parent: pulumi.Resource,
    permissions_boundary: pulumi.Input[str] | None = None,
) -> aws.iam.Role:
    """Create an execution role that lets a function run inside the VPC."""
    role = aws.iam.Role(
        f"{name}-role",
        aws.iam.RoleArgs(
            assume_role_policy=json.dumps(
                {
                    "Version": "2012-10-17",
                    "Statement": [
                        {
                            "Effect": "Allow",
                            "Principal": {"Service": "lambda.amazonaws.com"},
                            "Action": "sts:AssumeRole",
                        }
                    ],
                }
            ),
            permissions_boundary=permissions_boundary,
        ),
        opts=pulumi.ResourceOptions(parent=parent),
    )

    aws.iam.RolePolicyAttachment(
        f"{name}-vpc-access",
        aws.iam.RolePolicyAttachmentArgs(role=role.name, policy_arn=_VPC_ACCESS_POLICY_ARN),
        opts=pulumi.ResourceOptions(parent=parent),
    )
    return role


def allow_postgres_from(
    name: str,
    parent: pulumi.Resource,
    database_security_group_id: pulumi.Input[str],
    source_security_group_id: pulumi.Input[str],
    description: str,
) -> aws.ec2.SecurityGroupRule:
    """Open the PostgreSQL port on the database to one security group."""
    return aws.ec2.SecurityGroupRule(
        f"{name}-postgres-ingress",
        aws.ec2.SecurityGroupRuleArgs(
            type="ingress",
            protocol="tcp",
            from_port=5432,
            to_port=5432,
            security_group_id=database_security_group_id,
            source_security_group_id=source_security_group_id,
            description=description,
        ),
        opts=pulumi.ResourceOptions(parent=parent),
    )
