"""aws_db_instance: RDS database instances."""

import logging
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import Field, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import TaggedAttributes

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "aws_db_instance"

Engine = Literal[
    "mysql", "postgres", "mariadb",
    "oracle-se", "oracle-se1", "oracle-se2", "oracle-ee",
    "sqlserver-ee", "sqlserver-se", "sqlserver-ex", "sqlserver-web",
    "aurora", "aurora-mysql", "aurora-postgresql",
]
StorageType = Literal["standard", "gp2", "gp3", "io1", "io2"]

PROVISIONED_IOPS_TYPES = ("io1", "io2")

# On-demand USD/hour, single-AZ, us-east-1
INSTANCE_HOURLY_RATES = {
    "db.t3.micro": 0.017,
    "db.t3.small": 0.034,
    "db.t3.medium": 0.068,
    "db.t3.large": 0.136,
    "db.t4g.micro": 0.016,
    "db.t4g.small": 0.032,
    "db.t4g.medium": 0.065,
    "db.m5.large": 0.171,
    "db.m5.xlarge": 0.342,
    "db.m5.2xlarge": 0.684,
    "db.m6g.large": 0.152,
    "db.r5.large": 0.24,
    "db.r5.xlarge": 0.48,
    "db.r5.2xlarge": 0.96,
    "db.r6g.large": 0.215,
    "db.serverless": 0.06,
}
# Fallback by size suffix for classes missing above
SIZE_HOURLY_RATES = {
    "micro": 0.017,
    "small": 0.034,
    "medium": 0.068,
    "large": 0.17,
    "xlarge": 0.34,
    "2xlarge": 0.68,
    "4xlarge": 1.36,
    "8xlarge": 2.72,
}
STORAGE_GB_MONTHLY_RATES = {
    "standard": 0.10,
    "gp2": 0.115,
    "gp3": 0.115,
    "io1": 0.125,
    "io2": 0.125,
}
HOURS_PER_MONTH = 730


class DbInstanceAttributes(TaggedAttributes):
    """Attributes of an RDS database instance."""

    identifier: Optional[str] = None
    identifier_prefix: Optional[str] = None

    engine: Engine
    engine_version: Optional[str] = None

    instance_class: str = Field(..., pattern=r"^db\.[a-z0-9]+(\.[a-z0-9]+)?$")
    allocated_storage: Optional[int] = Field(None, ge=20, le=65536)
    storage_type: StorageType = "gp3"
    storage_encrypted: bool = True
    kms_key_id: Optional[str] = None
    iops: Optional[int] = Field(None, ge=1000, le=256000)

    db_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    manage_master_user_password: bool = True

    db_subnet_group_name: Optional[str] = None
    vpc_security_group_ids: List[str] = Field(default_factory=list)
    availability_zone: Optional[str] = None
    multi_az: bool = False
    publicly_accessible: bool = False

    backup_retention_period: int = Field(7, ge=0, le=35)
    backup_window: Optional[str] = None
    maintenance_window: Optional[str] = None

    enabled_cloudwatch_logs_exports: List[str] = Field(default_factory=list)
    performance_insights_enabled: bool = False
    performance_insights_retention_period: int = Field(7, ge=7, le=731)

    auto_minor_version_upgrade: bool = True
    deletion_protection: bool = False
    skip_final_snapshot: bool = True
    final_snapshot_identifier: Optional[str] = None

    @model_validator(mode='after')
    def validate_engine_rules(self) -> 'DbInstanceAttributes':
        """Cross-field rules that depend on engine and storage choices."""
        if self.identifier and self.identifier_prefix:
            raise ValueError("Cannot specify both 'identifier' and 'identifier_prefix'")

        if self.iops is not None and self.storage_type not in PROVISIONED_IOPS_TYPES:
            raise ValueError("IOPS can only be specified for io1 or io2 storage types")

        if self.password and self.manage_master_user_password:
            raise ValueError("Cannot specify both 'password' and 'manage_master_user_password'")

        if self.is_aurora:
            if self.allocated_storage is not None:
                raise ValueError("Aurora engines do not support 'allocated_storage'")
            if self.multi_az:
                raise ValueError("Aurora engines handle multi-AZ at the cluster level")
        elif self.allocated_storage is None:
            raise ValueError(f"allocated_storage is required for {self.engine} engines")

        if self.engine.startswith("sqlserver") and self.db_name:
            raise ValueError("SQL Server engines do not support 'db_name'")

        return self

    @property
    def is_aurora(self) -> bool:
        return self.engine.startswith("aurora")

    @property
    def is_serverless(self) -> bool:
        return self.instance_class == "db.serverless"

    @property
    def engine_family(self) -> str:
        engine = self.engine
        if engine in ("mysql", "aurora", "aurora-mysql"):
            return "mysql"
        if engine in ("postgres", "aurora-postgresql"):
            return "postgresql"
        if engine.startswith("oracle"):
            return "oracle"
        if engine.startswith("sqlserver"):
            return "sqlserver"
        return engine

    @property
    def requires_subnet_group(self) -> bool:
        # Aurora instances inherit the subnet group of their cluster
        return not self.is_aurora

    @property
    def supports_encryption(self) -> bool:
        return self.instance_class != "db.t2.micro"

    def monthly_cost(self) -> float:
        hourly = INSTANCE_HOURLY_RATES.get(self.instance_class)
        if hourly is None:
            size = self.instance_class.rsplit(".", 1)[-1]
            hourly = SIZE_HOURLY_RATES.get(size, 0.10)

        compute = hourly * HOURS_PER_MONTH
        storage = (self.allocated_storage or 0) * STORAGE_GB_MONTHLY_RATES[self.storage_type]
        total = compute + storage
        if self.multi_az:
            total *= 2
        return total

    def estimated_monthly_cost(self) -> str:
        return f"~${self.monthly_cost():.2f}/month"


class DbInstanceReference(ResourceReference):
    """Reference to an ``aws_db_instance``."""

    OUTPUTS = ("id", "arn", "address", "endpoint", "hosted_zone_id", "resource_id", "status", "port")
    COMPUTED = (
        "engine_family", "is_aurora", "is_serverless",
        "requires_subnet_group", "supports_encryption", "estimated_monthly_cost",
    )

    @property
    def engine_family(self) -> str:
        return self.attrs.engine_family

    @property
    def is_aurora(self) -> bool:
        return self.attrs.is_aurora

    @property
    def is_serverless(self) -> bool:
        return self.attrs.is_serverless

    @property
    def requires_subnet_group(self) -> bool:
        return self.attrs.requires_subnet_group

    @property
    def supports_encryption(self) -> bool:
        return self.attrs.supports_encryption

    @property
    def estimated_monthly_cost(self) -> str:
        return self.attrs.estimated_monthly_cost()


def aws_db_instance(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> DbInstanceReference:
    """
    Create an RDS database instance.

    Args:
        synth: Synthesizer receiving the resource block
        name: Symbolic resource name
        attributes: Instance attributes, see :class:`DbInstanceAttributes`

    Returns:
        Reference with outputs and cost/capability properties
    """
    attrs = DbInstanceAttributes.build(attributes)

    body: Dict[str, Any] = {
        "identifier": attrs.identifier,
        "identifier_prefix": attrs.identifier_prefix,
        "engine": attrs.engine,
        "engine_version": attrs.engine_version,
        "instance_class": attrs.instance_class,
        "allocated_storage": attrs.allocated_storage,
    }
    if attrs.allocated_storage is not None:
        body["storage_type"] = attrs.storage_type
    body["storage_encrypted"] = attrs.storage_encrypted
    body["kms_key_id"] = attrs.kms_key_id
    if attrs.iops is not None and attrs.storage_type in PROVISIONED_IOPS_TYPES:
        body["iops"] = attrs.iops

    body["db_name"] = attrs.db_name
    body["username"] = attrs.username
    body["password"] = attrs.password
    if attrs.manage_master_user_password:
        body["manage_master_user_password"] = True

    body["db_subnet_group_name"] = attrs.db_subnet_group_name
    if attrs.vpc_security_group_ids:
        body["vpc_security_group_ids"] = list(attrs.vpc_security_group_ids)
    body["availability_zone"] = attrs.availability_zone
    body["multi_az"] = attrs.multi_az
    body["publicly_accessible"] = attrs.publicly_accessible

    body["backup_retention_period"] = attrs.backup_retention_period
    body["backup_window"] = attrs.backup_window
    body["maintenance_window"] = attrs.maintenance_window

    if attrs.enabled_cloudwatch_logs_exports:
        body["enabled_cloudwatch_logs_exports"] = list(attrs.enabled_cloudwatch_logs_exports)
    body["performance_insights_enabled"] = attrs.performance_insights_enabled
    if attrs.performance_insights_enabled:
        body["performance_insights_retention_period"] = attrs.performance_insights_retention_period

    body["auto_minor_version_upgrade"] = attrs.auto_minor_version_upgrade
    body["deletion_protection"] = attrs.deletion_protection
    body["skip_final_snapshot"] = attrs.skip_final_snapshot
    if attrs.final_snapshot_identifier and not attrs.skip_final_snapshot:
        body["final_snapshot_identifier"] = attrs.final_snapshot_identifier
    body["tags"] = attrs.tags_block()

    if attrs.publicly_accessible:
        logger.warning(f"Database instance {name} is publicly accessible")

    synth.resource(RESOURCE_TYPE, name, body)
    return DbInstanceReference(RESOURCE_TYPE, name, attrs)


class RdsEngineConfigs:
    """Attribute presets for common engines, to merge into instance attributes."""

    @staticmethod
    def mysql(version: str = "8.0") -> Dict[str, Any]:
        return {
            "engine": "mysql",
            "engine_version": version,
            "enabled_cloudwatch_logs_exports": ["error", "general", "slowquery"],
        }

    @staticmethod
    def postgresql(version: str = "15.4") -> Dict[str, Any]:
        return {
            "engine": "postgres",
            "engine_version": version,
            "enabled_cloudwatch_logs_exports": ["postgresql"],
        }

    @staticmethod
    def mariadb(version: str = "10.11") -> Dict[str, Any]:
        return {
            "engine": "mariadb",
            "engine_version": version,
            "enabled_cloudwatch_logs_exports": ["error", "general", "slowquery"],
        }

    @staticmethod
    def aurora_mysql(version: str = "8.0.mysql_aurora.3.04.0") -> Dict[str, Any]:
        return {"engine": "aurora-mysql", "engine_version": version}

    @staticmethod
    def aurora_postgresql(version: str = "15.4") -> Dict[str, Any]:
        return {"engine": "aurora-postgresql", "engine_version": version}
