"""aws_cognito_user_pool_client: app clients of a Cognito user pool."""

from typing import Any, Dict, List, Literal, Mapping, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator

from terraform_aws.synthesis import ResourceReference, TerraformSynthesizer
from .base import ResourceAttributes

RESOURCE_TYPE = "aws_cognito_user_pool_client"

OAuthFlow = Literal["code", "implicit", "client_credentials"]
ExplicitAuthFlow = Literal[
    "ALLOW_ADMIN_USER_PASSWORD_AUTH",
    "ALLOW_CUSTOM_AUTH",
    "ALLOW_USER_PASSWORD_AUTH",
    "ALLOW_USER_SRP_AUTH",
    "ALLOW_REFRESH_TOKEN_AUTH",
    "ALLOW_USER_AUTH",
    "ADMIN_NO_SRP_AUTH",
    "CUSTOM_AUTH_FLOW_ONLY",
    "USER_PASSWORD_AUTH",
]
TokenUnit = Literal["seconds", "minutes", "hours", "days"]
LOCAL_HOSTS = ("localhost", "127.0.0.1")


class TokenValidityUnits(ResourceAttributes):
    access_token: TokenUnit = "hours"
    id_token: TokenUnit = "hours"
    refresh_token: TokenUnit = "days"


class AnalyticsConfiguration(ResourceAttributes):
    application_arn: Optional[str] = None
    application_id: Optional[str] = None
    external_id: Optional[str] = None
    role_arn: Optional[str] = None
    user_data_shared: Optional[bool] = None

    @model_validator(mode='after')
    def validate_target(self) -> 'AnalyticsConfiguration':
        if not self.application_arn and not self.application_id:
            raise ValueError("analytics_configuration requires application_arn or application_id")
        if self.application_id and not (self.role_arn and self.external_id):
            raise ValueError("analytics_configuration with application_id requires role_arn and external_id")
        return self


class CognitoUserPoolClientAttributes(ResourceAttributes):
    """Attributes of a user pool app client."""

    name: str = Field(..., min_length=1, max_length=128)
    user_pool_id: str

    allowed_oauth_flows: Optional[List[OAuthFlow]] = None
    allowed_oauth_flows_user_pool_client: bool = False
    allowed_oauth_scopes: Optional[List[str]] = None
    supported_identity_providers: Optional[List[str]] = None
    callback_urls: Optional[List[str]] = None
    logout_urls: Optional[List[str]] = None
    default_redirect_uri: Optional[str] = None

    generate_secret: bool = False
    enable_token_revocation: bool = True
    enable_propagate_additional_user_context_data: bool = False
    explicit_auth_flows: Optional[List[ExplicitAuthFlow]] = None
    prevent_user_existence_errors: Optional[Literal["ENABLED", "LEGACY"]] = None

    read_attributes: Optional[List[str]] = None
    write_attributes: Optional[List[str]] = None

    # Counted in token_validity_units (hours, hours, days by default)
    refresh_token_validity: Optional[int] = Field(None, ge=1, le=3650)
    access_token_validity: Optional[int] = Field(None, ge=1, le=1440)
    id_token_validity: Optional[int] = Field(None, ge=1, le=1440)
    token_validity_units: Optional[TokenValidityUnits] = None

    analytics_configuration: Optional[AnalyticsConfiguration] = None
    auth_session_validity: Optional[int] = Field(None, ge=3, le=15)

    @field_validator('callback_urls', 'logout_urls')
    @classmethod
    def validate_urls(cls, v: Optional[List[str]], info) -> Optional[List[str]]:
        for url in v or []:
            parsed = urlparse(url)
            if parsed.scheme == "https":
                continue
            if parsed.scheme == "http" and parsed.hostname in LOCAL_HOSTS:
                continue
            raise ValueError(f"{info.field_name} must use HTTPS (http is only allowed for localhost): {url}")
        return v

    @model_validator(mode='after')
    def validate_client(self) -> 'CognitoUserPoolClientAttributes':
        flows = self.allowed_oauth_flows or []
        if flows and not self.allowed_oauth_flows_user_pool_client:
            raise ValueError("allowed_oauth_flows requires allowed_oauth_flows_user_pool_client to be true")

        if "client_credentials" in flows:
            if not self.generate_secret:
                raise ValueError("client_credentials flow requires generate_secret to be true")
            if "code" in flows or "implicit" in flows:
                raise ValueError("client_credentials flow cannot be combined with code or implicit flows")

        if ("code" in flows or "implicit" in flows) and not self.callback_urls:
            raise ValueError("code and implicit flows require callback_urls")

        if self.default_redirect_uri and self.default_redirect_uri not in (self.callback_urls or []):
            raise ValueError("default_redirect_uri must be one of the callback_urls")

        return self

    @property
    def oauth_enabled(self) -> bool:
        return self.allowed_oauth_flows_user_pool_client and bool(self.allowed_oauth_flows)

    @property
    def primary_oauth_flow(self) -> Optional[str]:
        flows = self.allowed_oauth_flows or []
        for flow in ("code", "implicit", "client_credentials"):
            if flow in flows:
                return flow
        return None

    def has_auth_flow(self, *flows: str) -> bool:
        return any(flow in (self.explicit_auth_flows or []) for flow in flows)

    @property
    def client_type(self) -> str:
        if "client_credentials" in (self.allowed_oauth_flows or []):
            return "machine_to_machine"
        return "confidential" if self.generate_secret else "public"


class CognitoUserPoolClientReference(ResourceReference):
    """Reference to an ``aws_cognito_user_pool_client``."""

    OUTPUTS = ("id", "client_secret", "name")
    COMPUTED = (
        "oauth_enabled", "public_client", "confidential_client", "primary_oauth_flow",
        "srp_auth_enabled", "custom_auth_enabled", "admin_auth_enabled",
        "client_type", "analytics_enabled",
    )

    @property
    def public_client(self) -> bool:
        return not self.attrs.generate_secret

    @property
    def confidential_client(self) -> bool:
        return self.attrs.generate_secret

    @property
    def srp_auth_enabled(self) -> bool:
        return self.attrs.has_auth_flow("ALLOW_USER_SRP_AUTH")

    @property
    def custom_auth_enabled(self) -> bool:
        return self.attrs.has_auth_flow("ALLOW_CUSTOM_AUTH", "CUSTOM_AUTH_FLOW_ONLY")

    @property
    def admin_auth_enabled(self) -> bool:
        return self.attrs.has_auth_flow("ALLOW_ADMIN_USER_PASSWORD_AUTH", "ADMIN_NO_SRP_AUTH")

    @property
    def analytics_enabled(self) -> bool:
        return self.attrs.analytics_configuration is not None


def aws_cognito_user_pool_client(
    synth: TerraformSynthesizer,
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
) -> CognitoUserPoolClientReference:
    """Create a Cognito user pool client."""
    attrs = CognitoUserPoolClientAttributes.build(attributes)

    body: Dict[str, Any] = {
        "name": attrs.name,
        "user_pool_id": attrs.user_pool_id,
        "allowed_oauth_flows": attrs.allowed_oauth_flows,
        "allowed_oauth_flows_user_pool_client": attrs.allowed_oauth_flows_user_pool_client,
        "allowed_oauth_scopes": attrs.allowed_oauth_scopes,
        "supported_identity_providers": attrs.supported_identity_providers,
        "callback_urls": attrs.callback_urls,
        "logout_urls": attrs.logout_urls,
        "default_redirect_uri": attrs.default_redirect_uri,
        "generate_secret": attrs.generate_secret,
        "enable_token_revocation": attrs.enable_token_revocation,
        "enable_propagate_additional_user_context_data": attrs.enable_propagate_additional_user_context_data,
        "explicit_auth_flows": attrs.explicit_auth_flows,
        "prevent_user_existence_errors": attrs.prevent_user_existence_errors,
        "read_attributes": attrs.read_attributes,
        "write_attributes": attrs.write_attributes,
        "refresh_token_validity": attrs.refresh_token_validity,
        "access_token_validity": attrs.access_token_validity,
        "id_token_validity": attrs.id_token_validity,
        "auth_session_validity": attrs.auth_session_validity,
    }
    if attrs.token_validity_units:
        body["token_validity_units"] = attrs.token_validity_units.model_dump()
    if attrs.analytics_configuration:
        body["analytics_configuration"] = attrs.analytics_configuration.model_dump(exclude_none=True)

    synth.resource(RESOURCE_TYPE, name, body)
    return CognitoUserPoolClientReference(RESOURCE_TYPE, name, attrs)
