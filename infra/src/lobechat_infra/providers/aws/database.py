"""AWS Aurora Serverless v2 PostgreSQL implementation of LobechatDatabase."""

from __future__ import annotations

import json
import logging

import pulumi
import pulumi_aws as aws
import pulumi_random as random

from lobechat_infra.components.database import DatabaseOutputs

logger: logging.Logger = logging.getLogger(__name__)

_MASTER_USERNAME = "postgres"
# First Aurora PostgreSQL line shipping pgvector.
_ENGINE_VERSION = "15.4"


class AwsDatabaseArgs:
    """Arguments for the AWS Aurora database component.

    Args:
        vpc_id: ID of the VPC in which to place the cluster.
        subnet_ids: Isolated subnet IDs for the DB subnet group.
        database_name: Name of the default database created in the cluster.
        retain_on_delete: Keep the cluster and its secrets when the stack is
            destroyed, and take a final snapshot.
        min_capacity: Minimum Aurora capacity units.
        max_capacity: Maximum Aurora capacity units.
    """

    def __init__(
        self,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        database_name: str = "lobechat",
        retain_on_delete: bool = False,
        min_capacity: float = 0.5,
        max_capacity: float = 1.0,
    ) -> None:
        """Initialise Aurora database arguments."""
        self.vpc_id: pulumi.Input[str] = vpc_id
        self.subnet_ids: list[pulumi.Input[str]] = subnet_ids
        self.database_name: str = database_name
        self.retain_on_delete: bool = retain_on_delete
        self.min_capacity: float = min_capacity
        self.max_capacity: float = max_capacity


class AwsDatabase(pulumi.ComponentResource):
    """AWS Aurora PostgreSQL component satisfying ``LobechatDatabase``.

    Provisions an encrypted Aurora Serverless v2 cluster with a single writer,
    a generated credentials secret, an empty ``DATABASE_URL`` secret that the
    bootstrap function fills in, a security group, and a DB subnet group.
    """

    def __init__(
        self,
        name: str,
        args: AwsDatabaseArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """Initialise and provision the AWS database component.

        Args:
            name: Logical Pulumi resource name.
            args: Validated AWS-specific database arguments.
            opts: Optional Pulumi resource options.
        """
        super().__init__("lobechat:aws:Database", name, {}, opts)

        logger.debug(
            "provisioning_aws_database",
            extra={"name": name, "retain_on_delete": args.retain_on_delete},
        )

        stateful = pulumi.ResourceOptions(parent=self, retain_on_delete=args.retain_on_delete)

        security_group = aws.ec2.SecurityGroup(
            f"{name}-sg",
            aws.ec2.SecurityGroupArgs(
                vpc_id=args.vpc_id,
                description="RDS Postgres security group",
                egress=[
                    aws.ec2.SecurityGroupEgressArgs(
                        protocol="-1", from_port=0, to_port=0, cidr_blocks=["0.0.0.0/0"]
                    )
                ],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        subnet_group = aws.rds.SubnetGroup(
            f"{name}-subnets",
            aws.rds.SubnetGroupArgs(subnet_ids=args.subnet_ids),
            opts=pulumi.ResourceOptions(parent=self),
        )

        db_password = random.RandomPassword(
            f"{name}-db-password-gen",
            random.RandomPasswordArgs(length=32, special=False),
            opts=pulumi.ResourceOptions(parent=self),
        )

        credentials_secret = aws.secretsmanager.Secret(
            f"{name}-credentials",
            aws.secretsmanager.SecretArgs(description="LobeChat database credentials"),
            opts=stateful,
        )

        aws.secretsmanager.SecretVersion(
            f"{name}-credentials-version",
            aws.secretsmanager.SecretVersionArgs(
                secret_id=credentials_secret.id,
                secret_string=db_password.result.apply(
                    lambda pw: json.dumps({"username": _MASTER_USERNAME, "password": pw})
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        database_url_secret = aws.secretsmanager.Secret(
            f"{name}-database-url",
            aws.secretsmanager.SecretArgs(description="LobeChat DATABASE_URL"),
            opts=stateful,
        )

        cluster = aws.rds.Cluster(
            f"{name}-cluster",
            aws.rds.ClusterArgs(
                engine="aurora-postgresql",
                engine_mode="provisioned",
                engine_version=_ENGINE_VERSION,
                database_name=args.database_name,
                master_username=_MASTER_USERNAME,
                master_password=db_password.result,
                db_subnet_group_name=subnet_group.name,
                vpc_security_group_ids=[security_group.id],
                storage_encrypted=True,
                serverlessv2_scaling_configuration=aws.rds.ClusterServerlessv2ScalingConfigurationArgs(
                    min_capacity=args.min_capacity,
                    max_capacity=args.max_capacity,
                ),
                deletion_protection=False,
                skip_final_snapshot=not args.retain_on_delete,
                final_snapshot_identifier=f"{name}-final" if args.retain_on_delete else None,
                enabled_cloudwatch_logs_exports=["postgresql"],
            ),
            opts=stateful,
        )

        self.writer: aws.rds.ClusterInstance = aws.rds.ClusterInstance(
            f"{name}-writer",
            aws.rds.ClusterInstanceArgs(
                cluster_identifier=cluster.id,
                instance_class="db.serverless",
                engine=cluster.engine,
                engine_version=cluster.engine_version,
            ),
            opts=stateful,
        )

        self._outputs: DatabaseOutputs = DatabaseOutputs(
            credentials_secret_arn=credentials_secret.arn,
            database_url_secret_arn=database_url_secret.arn,
            host=cluster.endpoint,
            port=cluster.port,
            database_name=pulumi.Output.from_input(args.database_name),
            security_group_id=security_group.id,
        )

        self.register_outputs(
            {
                "credentials_secret_arn": self._outputs.credentials_secret_arn,
                "database_url_secret_arn": self._outputs.database_url_secret_arn,
                "host": self._outputs.host,
                "port": self._outputs.port,
                "database_name": self._outputs.database_name,
                "security_group_id": self._outputs.security_group_id,
            }
        )

    @property
    def outputs(self) -> DatabaseOutputs:
        """Return the resolved database connection outputs."""
        return self._outputs
