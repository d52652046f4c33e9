"""AWS VPC implementation of LobechatNetwork."""

from __future__ import annotations

import logging

import pulumi
import pulumi_aws as aws

from lobechat_infra.components.network import NetworkOutputs

logger: logging.Logger = logging.getLogger(__name__)


class AwsNetworkArgs:
    """Arguments for the AWS network component.

    Args:
        region: AWS region; availability zones ``<region>a`` and ``<region>b``
            are used.
    """

    def __init__(self, region: str = "us-west-2") -> None:
        self.region: str = region

    @property
    def primary_zone(self) -> str:
        return f"{self.region}a"

    @property
    def secondary_zone(self) -> str:
        return f"{self.region}b"


class AwsNetwork(pulumi.ComponentResource):
    """AWS VPC + subnets + IGW + NAT Gateway satisfying ``LobechatNetwork``.

    Provisions 10.0.0.0/16 with one public subnet, one private subnet with
    NAT egress (Lambda functions), and two isolated subnets (the database
    subnet group needs two zones). Only the primary zone carries compute,
    and a single NAT Gateway keeps the egress cost down.
    """

    def __init__(
        self,
        name: str,
        args: AwsNetworkArgs | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("lobechat:aws:Network", name, {}, opts)

        args = args or AwsNetworkArgs()
        logger.debug("provisioning_aws_network", extra={"name": name, "region": args.region})

        vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            aws.ec2.VpcArgs(
                cidr_block="10.0.0.0/16",
                enable_dns_support=True,
                enable_dns_hostnames=True,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        public = aws.ec2.Subnet(
            f"{name}-public",
            aws.ec2.SubnetArgs(
                vpc_id=vpc.id,
                cidr_block="10.0.0.0/24",
                availability_zone=args.primary_zone,
                map_public_ip_on_launch=True,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        egress = aws.ec2.Subnet(
            f"{name}-private-egress",
            aws.ec2.SubnetArgs(
                vpc_id=vpc.id,
                cidr_block="10.0.10.0/24",
                availability_zone=args.primary_zone,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        isolated_a = aws.ec2.Subnet(
            f"{name}-private-db-a",
            aws.ec2.SubnetArgs(
                vpc_id=vpc.id,
                cidr_block="10.0.20.0/24",
                availability_zone=args.primary_zone,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        isolated_b = aws.ec2.Subnet(
            f"{name}-private-db-b",
            aws.ec2.SubnetArgs(
                vpc_id=vpc.id,
                cidr_block="10.0.21.0/24",
                availability_zone=args.secondary_zone,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        igw = aws.ec2.InternetGateway(
            f"{name}-igw",
            aws.ec2.InternetGatewayArgs(vpc_id=vpc.id),
            opts=pulumi.ResourceOptions(parent=self),
        )

        eip = aws.ec2.Eip(
            f"{name}-nat-eip",
            aws.ec2.EipArgs(domain="vpc"),
            opts=pulumi.ResourceOptions(parent=self),
        )

        nat = aws.ec2.NatGateway(
            f"{name}-nat",
            aws.ec2.NatGatewayArgs(
                subnet_id=public.id,
                allocation_id=eip.id,
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[igw]),
        )

        self._route_table(
            f"{name}-public",
            vpc.id,
            [public],
            aws.ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", gateway_id=igw.id),
        )
        self._route_table(
            f"{name}-private-egress",
            vpc.id,
            [egress],
            aws.ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", nat_gateway_id=nat.id),
        )
        self._route_table(f"{name}-private-db", vpc.id, [isolated_a, isolated_b])

        self._outputs: NetworkOutputs = NetworkOutputs(
            vpc_id=vpc.id,
            public_subnet_ids=[public.id],
            egress_subnet_ids=[egress.id],
            isolated_subnet_ids=[isolated_a.id, isolated_b.id],
        )

        self.register_outputs(
            {
                "vpc_id": self._outputs.vpc_id,
                "public_subnet_ids": self._outputs.public_subnet_ids,
                "egress_subnet_ids": self._outputs.egress_subnet_ids,
                "isolated_subnet_ids": self._outputs.isolated_subnet_ids,
            }
        )

    @property
    def outputs(self) -> NetworkOutputs:
        """Return the resolved network outputs."""
        return self._outputs

    def _route_table(
        self,
        name: str,
        vpc_id: pulumi.Input[str],
        subnets: list[aws.ec2.Subnet],
        default_route: aws.ec2.RouteTableRouteArgs | None = None,
    ) -> aws.ec2.RouteTable:
        """Create ``<name>-rt`` and associate each subnet with it.

        Without ``default_route`` the table carries the VPC-local route only.
        """
        route_table = aws.ec2.RouteTable(
            f"{name}-rt",
            aws.ec2.RouteTableArgs(
                vpc_id=vpc_id,
                routes=[default_route] if default_route is not None else [],
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )
        suffixes = ["a", "b"] if len(subnets) > 1 else [""]
        for suffix, subnet in zip(suffixes, subnets):
            aws.ec2.RouteTableAssociation(
                f"{name}-rta-{suffix}" if suffix else f"{name}-rta",
                aws.ec2.RouteTableAssociationArgs(subnet_id=subnet.id, route_table_id=route_table.id),
                opts=pulumi.ResourceOptions(parent=self),
            )
        return route_table
