"""AWS resource builders and the registry used by stack files."""

from typing import Callable, Dict, Type

from terraform_aws.errors import UnknownResourceTypeError
from terraform_aws.synthesis import ResourceReference

from .acm_certificate import AcmCertificateReference, aws_acm_certificate
from .acm_certificate_validation import (
    AcmCertificateValidationReference,
    aws_acm_certificate_validation,
)
from .batch_compute_environment import (
    BatchComputeEnvironmentReference,
    BatchComputeEnvironmentTemplates,
    BatchInstanceTypes,
    aws_batch_compute_environment,
)
from .cognito_user_pool_client import CognitoUserPoolClientReference, aws_cognito_user_pool_client
from .db_instance import DbInstanceReference, RdsEngineConfigs, aws_db_instance
from .ecs_cluster import EcsClusterReference, aws_ecs_cluster
from .ecs_service import EcsServiceReference, aws_ecs_service
from .iam_user import IamUserReference, PermissionsBoundaries, UserPatterns, aws_iam_user
from .kms_key import KmsKeyReference, aws_kms_key
from .lambda_function import LambdaFunctionReference, aws_lambda_function
from .s3_bucket import S3BucketReference, aws_s3_bucket
from .security_group import SecurityGroupReference, aws_security_group
from .sns_topic import SnsTopicReference, aws_sns_topic
from .sqs_queue import SqsQueueReference, aws_sqs_queue

RESOURCE_BUILDERS: Dict[str, Callable[..., ResourceReference]] = {
    "aws_acm_certificate": aws_acm_certificate,
    "aws_acm_certificate_validation": aws_acm_certificate_validation,
    "aws_batch_compute_environment": aws_batch_compute_environment,
    "aws_cognito_user_pool_client": aws_cognito_user_pool_client,
    "aws_db_instance": aws_db_instance,
    "aws_ecs_cluster": aws_ecs_cluster,
    "aws_ecs_service": aws_ecs_service,
    "aws_iam_user": aws_iam_user,
    "aws_kms_key": aws_kms_key,
    "aws_lambda_function": aws_lambda_function,
    "aws_s3_bucket": aws_s3_bucket,
    "aws_security_group": aws_security_group,
    "aws_sns_topic": aws_sns_topic,
    "aws_sqs_queue": aws_sqs_queue,
}

RESOURCE_REFERENCES: Dict[str, Type[ResourceReference]] = {
    "aws_acm_certificate": AcmCertificateReference,
    "aws_acm_certificate_validation": AcmCertificateValidationReference,
    "aws_batch_compute_environment": BatchComputeEnvironmentReference,
    "aws_cognito_user_pool_client": CognitoUserPoolClientReference,
    "aws_db_instance": DbInstanceReference,
    "aws_ecs_cluster": EcsClusterReference,
    "aws_ecs_service": EcsServiceReference,
    "aws_iam_user": IamUserReference,
    "aws_kms_key": KmsKeyReference,
    "aws_lambda_function": LambdaFunctionReference,
    "aws_s3_bucket": S3BucketReference,
    "aws_security_group": SecurityGroupReference,
    "aws_sns_topic": SnsTopicReference,
    "aws_sqs_queue": SqsQueueReference,
}


def get_builder(resource_type: str) -> Callable[..., ResourceReference]:
    """
    Look up the builder for a Terraform resource type.

    Raises:
        UnknownResourceTypeError: If no builder is registered
    """
    try:
        return RESOURCE_BUILDERS[resource_type]
    except KeyError:
        raise UnknownResourceTypeError(resource_type) from None


__all__ = [
    "RESOURCE_BUILDERS",
    "RESOURCE_REFERENCES",
    "get_builder",
    "aws_acm_certificate",
    "aws_acm_certificate_validation",
    "aws_batch_compute_environment",
    "aws_cognito_user_pool_client",
    "aws_db_instance",
    "aws_ecs_cluster",
    "aws_ecs_service",
    "aws_iam_user",
    "aws_kms_key",
    "aws_lambda_function",
    "aws_s3_bucket",
    "aws_security_group",
    "aws_sns_topic",
    "aws_sqs_queue",
    "BatchComputeEnvironmentTemplates",
    "BatchInstanceTypes",
    "PermissionsBoundaries",
    "RdsEngineConfigs",
    "UserPatterns",
]
