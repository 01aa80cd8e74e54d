"""Command line flags accepted by the cache server, and their help text."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

MAX_INT64 = 9223372036854775807


class FlagType(enum.Enum):
    """The type of value a flag holds."""

    STRING = "string"
    INT = "int"
    INT64 = "int64"
    BOOL = "bool"
    DURATION = "duration"


def _go_quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def _format_duration(seconds: float) -> str:
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    remaining = abs(seconds)
    hours, remaining = divmod(remaining, 3600)
    minutes, remaining = divmod(remaining, 60)
    secs = f"{remaining:g}s"
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{secs}"
    if minutes:
        return f"{sign}{int(minutes)}m{secs}"
    return f"{sign}{secs}"


def _unquote_usage(usage: str) -> tuple[str, str]:
    """Extract a `placeholder` from usage text, returning (placeholder, usage)."""
    start = usage.find("`")
    if start != -1:
        end = usage.find("`", start + 1)
        if end != -1:
            name = usage[start + 1 : end]
            return name, usage[:start] + name + usage[end + 1 :]
    return "", usage


@dataclass(frozen=True)
class Flag:
    """A command line flag with its default value and environment variables."""

    name: str
    type: FlagType
    usage: str = ""
    env_vars: tuple[str, ...] = ()
    default: Any = None
    default_text: str = ""

    @property
    def value(self) -> Any:
        """The effective default value, falling back to the type's zero value."""
        if self.default is not None:
            return self.default
        return {
            FlagType.STRING: "",
            FlagType.INT: 0,
            FlagType.INT64: 0,
            FlagType.BOOL: False,
            FlagType.DURATION: 0.0,
        }[self.type]

    @property
    def takes_value(self) -> bool:
        return self.type is not FlagType.BOOL

    def _default_description(self) -> str:
        if self.default_text:
            return self.default_text
        value = self.value
        if self.type is FlagType.STRING:
            return _go_quote(value) if value else ""
        if self.type is FlagType.BOOL:
            return "true" if value else "false"
        if self.type is FlagType.DURATION:
            return _format_duration(value)
        return str(value)

    def help_string(self) -> str:
        """Return the help line: names, a tab, usage, default and env vars."""
        placeholder, usage = _unquote_usage(self.usage)
        if not placeholder and self.takes_value:
            placeholder = "value"

        prefix = "-" if len(self.name) == 1 else "--"
        names = prefix + self.name
        if placeholder:
            names += " " + placeholder

        default = self._default_description()
        default_part = f" (default: {default})" if default else ""
        text = f"{names}\t{(usage + default_part).strip()}"

        if self.env_vars:
            text += " [$" + ", $".join(self.env_vars) + "]"
        return text


def _auth_msg(service: str, methods: Sequence[str]) -> str:
    return f"Applies to {service} auth method(s): {', '.join(methods)}."


def get_cli_flags(
    zstd_implementations: Sequence[str],
    s3_auth_methods: Mapping[str, str],
    azblob_auth_methods: Mapping[str, str],
) -> list[Flag]:
    """Return the flags the server accepts.

    s3_auth_methods maps "access_key", "aws_credentials_file" and "iam_role"
    to the method names; azblob_auth_methods maps "shared_key",
    "client_secret" and "client_certificate". Their values, in order, are
    the allowed auth methods.
    """
    zstd_impls = ", ".join(f'"{name}"' for name in zstd_implementations)

    def s3(*keys: str) -> str:
        return _auth_msg("s3", [s3_auth_methods[k] for k in keys])

    def az(*keys: str) -> str:
        return _auth_msg("AzBlob", [azblob_auth_methods[k] for k in keys])

    S, I, I64, B, D = (
        FlagType.STRING,
        FlagType.INT,
        FlagType.INT64,
        FlagType.BOOL,
        FlagType.DURATION,
    )

    def flag(name, kind, usage, env, default=None, default_text="") -> Flag:
        if isinstance(env, str):
            env = (env,)
        return Flag(name, kind, usage, tuple(env), default, default_text)

    return [
        flag("config_file", S,
             "Path to a YAML configuration file. If this flag is specified then all other flags "
             "are ignored.",
             "BAZEL_REMOTE_CONFIG_FILE", ""),
        flag("dir", S,
             "Directory path where to store the cache contents. This flag is required.",
             "BAZEL_REMOTE_DIR", ""),
        flag("max_size", I64,
             "The maximum size of bazel-remote's disk cache in GiB. This flag is required.",
             "BAZEL_REMOTE_MAX_SIZE"),
        flag("max_size_hard_limit", I64,
             "If enabled, the maximum size of bazel-remote's disk cache including files queued "
             "for eviction in GiB, before bazel-remote will reject write requests. A reasonable "
             "value might be 5% larger than --max_size.",
             "BAZEL_REMOTE_MAX_SIZE_HARD_LIMIT", -1),
        flag("storage_mode", S,
             'Which format to store CAS blobs in. Must be one of "zstd" or "uncompressed".',
             "BAZEL_REMOTE_STORAGE_MODE", "zstd"),
        flag("zstd_implementation", S,
             "ZSTD implementation to use. Supported values: " + zstd_impls,
             "BAZEL_REMOTE_ZSTD_IMPLEMENTATION", "go"),
        flag("http_address", S,
             "Address specification for the HTTP server listener, formatted either as "
             "[host]:port for TCP or unix://path.sock for Unix domain sockets.",
             "BAZEL_REMOTE_HTTP_ADDRESS"),
        flag("host", S,
             "DEPRECATED. Use --http_address to specify the HTTP server listener.",
             "BAZEL_REMOTE_HOST", ""),
        flag("port", I,
             "DEPRECATED. Use --http_address to specify the HTTP server listener.",
             "BAZEL_REMOTE_PORT", 8080),
        flag("grpc_address", S,
             "Address specification for the gRPC server listener, formatted either as "
             "[host]:port for TCP or unix://path.sock for Unix domain sockets. "
             "Set to 'none' to disable.",
             "BAZEL_REMOTE_GRPC_ADDRESS"),
        flag("grpc_port", I,
             "DEPRECATED. Use --grpc_address to specify the gRPC server listener. Set to 0 to disable.",
             "BAZEL_REMOTE_GRPC_PORT", 9092),
        flag("profile_address", S,
             "Address specification for a http server to listen on for profiling, formatted "
             "either as [host]:port for TCP or unix://path.sock for Unix domain sockets. Off by "
             "default, but can also be set to 'none' to disable explicitly.",
             "BAZEL_REMOTE_PROFILE_ADDRESS", None, '"", ie profiling disabled'),
        flag("profile_host", S,
             "DEPRECATED. Use --profile_address instead. A host address to listen on for "
             "profiling, if enabled by a valid --profile_port setting.",
             "BAZEL_REMOTE_PROFILE_HOST", "127.0.0.1"),
        flag("profile_port", I,
             "DEPRECATED. Use --profile_address instead. If a positive integer, serve "
             "/debug/pprof/* URLs from http://profile_host:profile_port.",
             "BAZEL_REMOTE_PROFILE_PORT", 0, "0, ie profiling disabled"),
        flag("http_read_timeout", D,
             "The HTTP read timeout for a client request in seconds (does not apply to the "
             "proxy backends or the profiling endpoint)",
             "BAZEL_REMOTE_HTTP_READ_TIMEOUT", 0.0, "0s, ie disabled"),
        flag("http_write_timeout", D,
             "The HTTP write timeout for a server response in seconds (does not apply to the "
             "proxy backends or the profiling endpoint)",
             "BAZEL_REMOTE_HTTP_WRITE_TIMEOUT", 0.0, "0s, ie disabled"),
        flag("htpasswd_file", S,
             "Path to a .htpasswd file. This flag is optional. Please read "
             "https://httpd.apache.org/docs/2.4/programs/htpasswd.html.",
             "BAZEL_REMOTE_HTPASSWD_FILE", ""),
        flag("min_tls_version", S,
             "The minimum TLS version that is acceptable for incoming requests (does not apply "
             "to proxy backends). Allowed values: 1.0, 1.1, 1.2, 1.3.",
             "BAZEL_REMOTE_MIN_TLS_VERSION", "1.0"),
        flag("tls_ca_file", S,
             "Optional. Enables mTLS (authenticating client certificates), should be the "
             "certificate authority that signed the client certificates.",
             "BAZEL_REMOTE_TLS_CA_FILE", ""),
        flag("tls_cert_file", S, "Path to a pem encoded certificate file.",
             "BAZEL_REMOTE_TLS_CERT_FILE", ""),
        flag("tls_key_file", S, "Path to a pem encoded key file.",
             "BAZEL_REMOTE_TLS_KEY_FILE", ""),
        flag("allow_unauthenticated_reads", B,
             "If authentication is enabled (--htpasswd_file or --tls_ca_file), allow "
             "unauthenticated clients read access.",
             "BAZEL_REMOTE_UNAUTHENTICATED_READS", False,
             "false, ie if authentication is required, read-only requests must also be authenticated"),
        flag("idle_timeout", D,
             "The maximum period of having received no request after which the server will "
             "shut itself down.",
             "BAZEL_REMOTE_IDLE_TIMEOUT", 0.0, "0s, ie disabled"),
        flag("max_queued_uploads", I,
             "When using proxy backends, sets the maximum number of objects in queue for "
             "upload. If the queue is full, uploads will be skipped until the queue has space again.",
             "BAZEL_REMOTE_MAX_QUEUED_UPLOADS", 1000000),
        flag("max_blob_size", I64,
             "The maximum logical/uncompressed blob size that will be accepted from clients. "
             "Note that this limit is not applied to preexisting blobs in the cache.",
             "BAZEL_REMOTE_MAX_BLOB_SIZE", MAX_INT64, str(MAX_INT64)),
        flag("max_proxy_blob_size", I64,
             "The maximum logical/uncompressed blob size that will be downloaded from proxies. "
             "Note that this limit is not applied to preexisting blobs in the cache.",
             "BAZEL_REMOTE_MAX_PROXY_BLOB_SIZE", MAX_INT64, str(MAX_INT64)),
        flag("num_uploaders", I,
             "When using proxy backends, sets the number of Goroutines to process parallel "
             "uploads to backend.",
             "BAZEL_REMOTE_NUM_UPLOADERS", 100),
        flag("grpc_proxy.url", S,
             "The base URL to use for the experimental grpc proxy backend, e.g. "
             "grpc://localhost:9090 or grpcs://example.com:7070. Note that this requires a "
             "backend with remote asset API support if you want http client requests to work.",
             "BAZEL_REMOTE_GRPC_PROXY_URL", ""),
        flag("grpc_proxy.key_file", S,
             "Path to a key used to authenticate with the proxy backend using mTLS. If this "
             "flag is provided, then grpc_proxy.cert_file must also be specified.",
             "BAZEL_REMOTE_GRPC_PROXY_KEY_FILE", ""),
        flag("grpc_proxy.cert_file", S,
             "Path to a certificate used to authenticate with the proxy backend using mTLS. If "
             "this flag is provided, then grpc_proxy.key_file must also be specified.",
             "BAZEL_REMOTE_GRPC_PROXY_CERT_FILE", ""),
        flag("grpc_proxy.ca_file", S,
             "Path to a certificate autority used to validate the grpc proxy backend certificate.",
             "BAZEL_REMOTE_GRPC_PROXY_CA_FILE", ""),
        flag("http_proxy.url", S, "The base URL to use for a http proxy backend.",
             "BAZEL_REMOTE_HTTP_PROXY_URL", ""),
        flag("http_proxy.key_file", S,
             "Path to a key used to authenticate with the proxy backend using mTLS. If this "
             "flag is provided, then http_proxy.cert_file must also be specified.",
             "BAZEL_REMOTE_HTTP_PROXY_KEY_FILE", ""),
        flag("http_proxy.cert_file", S,
             "Path to a certificate used to authenticate with the proxy backend using mTLS. If "
             "this flag is provided, then http_proxy.key_file must also be specified.",
             "BAZEL_REMOTE_HTTP_PROXY_CERT_FILE", ""),
        flag("http_proxy.ca_file", S,
             "Path to a certificate autority used to validate the http proxy backend certificate.",
             "BAZEL_REMOTE_HTTP_PROXY_CA_FILE", ""),
        flag("gcs_proxy.bucket", S,
             "The bucket to use for the Google Cloud Storage proxy backend.",
             "BAZEL_REMOTE_GCS_BUCKET", ""),
        flag("gcs_proxy.use_default_credentials", B,
             "Whether or not to use authentication for the Google Cloud Storage proxy backend.",
             "BAZEL_REMOTE_GCS_USE_DEFAULT_CREDENTIALS", False),
        flag("gcs_proxy.json_credentials_file", S,
             "Path to a JSON file that contains Google credentials for the Google Cloud "
             "Storage proxy backend.",
             "BAZEL_REMOTE_GCS_JSON_CREDENTIALS_FILE", ""),
        flag("ldap.url", S,
             "The LDAP URL which may include a port. LDAP over SSL (LDAPs) is also supported. "
             "Note that this feature is currently considered experimental.",
             "BAZEL_REMOTE_LDAP_URL", ""),
        flag("ldap.base_dn", S, "The distinguished name of the search base.",
             "BAZEL_REMOTE_LDAP_BASE_DN", ""),
        # Anonymous access is allowed when no bind user or bind password is given.
        flag("ldap.bind_user", S,
             "The user who is allowed to perform a search within the base DN. If none is "
             "specified the connection and the search is performed without an authentication. "
             "It is recommended to use a read-only account.",
             "BAZEL_REMOTE_LDAP_BIND_USER", ""),
        flag("ldap.bind_password", S, "The password of the bind user.",
             "BAZEL_REMOTE_LDAP_BIND_PASSWORD", ""),
        flag("ldap.username_attribute", S, "The user attribute of a connecting user.",
             "BAZEL_REMOTE_LDAP_USER_ATTRIBUTE", "uid"),
        flag("ldap.groups_query", S, "Filter clause for searching groups.",
             "BAZEL_REMOTE_LDAP_GROUPS_QUERY"),
        flag("ldap.cache_time", I,
             "The amount of time to cache a successful authentication in seconds.",
             "BAZEL_REMOTE_LDAP_CACHE_TIME", 3600),
        flag("s3.endpoint", S, "The S3/minio endpoint to use when using S3 proxy backend.",
             "BAZEL_REMOTE_S3_ENDPOINT", ""),
        flag("s3.bucket", S, "The S3/minio bucket to use when using S3 proxy backend.",
             "BAZEL_REMOTE_S3_BUCKET", ""),
        flag("s3.bucket_lookup_type", S,
             "The S3/minio bucket lookup type to use when using S3 proxy backend. Allowed "
             "values: auto, dns, path.",
             "BAZEL_REMOTE_S3_BUCKET_LOOKUP_TYPE", "auto"),
        flag("s3.prefix", S, "The S3/minio object prefix to use when using S3 proxy backend.",
             "BAZEL_REMOTE_S3_PREFIX", ""),
        flag("s3.auth_method", S,
             "The S3/minio authentication method. This argument is required when an s3 proxy "
             f"backend is used. Allowed values: {', '.join(s3_auth_methods.values())}.",
             "BAZEL_REMOTE_S3_AUTH_METHOD", ""),
        flag("s3.access_key_id", S,
             "The S3/minio access key to use when using S3 proxy backend. " + s3("access_key"),
             "BAZEL_REMOTE_S3_ACCESS_KEY_ID", ""),
        flag("s3.secret_access_key", S,
             "The S3/minio secret access key to use when using S3 proxy backend. "
             + s3("access_key"),
             "BAZEL_REMOTE_S3_SECRET_ACCESS_KEY", ""),
        flag("s3.session_token", S,
             "The S3/minio session token to use when using S3 proxy backend. Optional. "
             + s3("access_key"),
             "BAZEL_REMOTE_S3_SESSION_TOKEN", ""),
        flag("s3.signature_type", S,
             "Which type of s3 signature to use when using S3 proxy backend. Only applies when "
             "using the s3 access_key auth method. Allowed values: v2, v4, v4streaming, anonymous.",
             "BAZEL_REMOTE_S3_SIGNATURE_TYPE", None, "v4"),
        flag("s3.aws_shared_credentials_file", S,
             "Path to the AWS credentials file. If not specified, the minio client will default "
             "to '~/.aws/credentials'. " + s3("aws_credentials_file"),
             ("BAZEL_REMOTE_S3_AWS_SHARED_CREDENTIALS_FILE", "AWS_SHARED_CREDENTIALS_FILE"), ""),
        flag("s3.aws_profile", S,
             "The aws credentials profile to use from within s3.aws_shared_credentials_file. "
             + s3("aws_credentials_file"),
             ("BAZEL_REMOTE_S3_AWS_PROFILE", "AWS_PROFILE"), "default"),
        flag("s3.disable_ssl", B,
             "Whether to disable TLS/SSL when using the S3 proxy backend.",
             "BAZEL_REMOTE_S3_DISABLE_SSL", None, "false, ie enable TLS/SSL"),
        flag("s3.update_timestamps", B,
             "Whether to update timestamps of object on cache hit.",
             "BAZEL_REMOTE_S3_UPDATE_TIMESTAMPS", None, "false"),
        flag("s3.iam_role_endpoint", S,
             "Endpoint for using IAM security credentials. By default it will look for "
             "credentials in the standard locations for the AWS platform. " + s3("iam_role"),
             "BAZEL_REMOTE_S3_IAM_ROLE_ENDPOINT", ""),
        flag("s3.region", S,
             "The AWS region. Required when not specifying S3/minio access keys.",
             "BAZEL_REMOTE_S3_REGION", ""),
        flag("s3.key_version", I,
             "DEPRECATED. Key version 2 now is the only supported value. This flag will be removed.",
             "BAZEL_REMOTE_S3_KEY_VERSION", 2, "2"),
        flag("s3.max_idle_conns", I,
             "The maximum number of idle connections to use when using the S3 proxy backend.",
             "BAZEL_REMOTE_S3_MAX_IDLE_CONNS", None, "1024"),
        flag("azblob.tenant_id", S,
             "The Azure blob storage tenant id to use when using azblob proxy backend.",
             ("BAZEL_REMOTE_AZBLOB_TENANT_ID", "AZURE_TENANT_ID"), ""),
        flag("azblob.storage_account", S,
             "The Azure blob storage storage account to use when using azblob proxy backend.",
             "BAZEL_REMOTE_AZBLOB_STORAGE_ACCOUNT", ""),
        flag("azblob.container_name", S,
             "The Azure blob storage container name to use when using azblob proxy backend.",
             "BAZEL_REMOTE_AZBLOB_CONTAINER_NAME", ""),
        flag("azblob.prefix", S,
             "The Azure blob storage object prefix to use when using azblob proxy backend.",
             "BAZEL_REMOTE_AZBLOB_PREFIX", ""),
        flag("azblob.update_timestamps", B,
             "Whether to update timestamps of object on cache hit.",
             "BAZEL_REMOTE_AZBLOB_UPDATE_TIMESTAMPS", None, "false"),
        flag("azblob.auth_method", S,
             "The Azure blob storage authentication method. This argument is required when an "
             "azblob proxy backend is used. Allowed values: "
             f"{', '.join(azblob_auth_methods.values())}.",
             "BAZEL_REMOTE_AZBLOB_AUTH_METHOD", ""),
        flag("azblob.shared_key", S,
             "The Azure blob storage account access key to use when using azblob proxy backend. "
             + az("shared_key"),
             ("BAZEL_REMOTE_AZBLOB_SHARED_KEY", "AZURE_STORAGE_ACCOUNT_KEY"), ""),
        flag("azblob.client_id", S,
             "The Azure blob storage client id to use when using azblob proxy backend. "
             + az("client_secret", "client_certificate"),
             ("BAZEL_REMOTE_AZBLOB_CLIENT_ID", "AZURE_CLIENT_ID"), ""),
        flag("azblob.client_secret", S,
             "The Azure blob storage client secret key to use when using azblob proxy backend. "
             + az("client_secret"),
             ("BAZEL_REMOTE_AZBLOB_SECRET_CLIENT_SECRET", "AZURE_CLIENT_SECRET"), ""),
        flag("azblob.cert_path", S,
             "Path to the certificates file. " + az("client_certificate"),
             ("BAZEL_REMOTE_AZBLOB_CERT_PATH", "AZURE_CLIENT_CERTIFICATE_PATH"), ""),
        flag("disable_http_ac_validation", B,
             "Whether to disable ActionResult validation for HTTP requests.",
             "BAZEL_REMOTE_DISABLE_HTTP_AC_VALIDATION", None, "false, ie enable validation"),
        flag("disable_grpc_ac_deps_check", B,
             "Whether to disable ActionResult dependency checks for gRPC GetActionResult requests.",
             "BAZEL_REMOTE_DISABLE_GRPS_AC_DEPS_CHECK", None,
             "false, ie enable ActionCache dependency checks"),
        flag("enable_ac_key_instance_mangling", B,
             "Whether to enable mangling ActionCache keys with non-empty instance names.",
             "BAZEL_REMOTE_ENABLE_AC_KEY_INSTANCE_MANGLING", None, "false, ie disable mangling"),
        flag("enable_endpoint_metrics", B,
             "Whether to enable metrics for each HTTP/gRPC endpoint.",
             "BAZEL_REMOTE_ENABLE_ENDPOINT_METRICS", None, "false, ie disable metrics"),
        flag("http_metrics_prefix", B,
             'Whether to prefix http metrics with "bazel_remote" or not',
             "BAZEL_REMOTE_HTTP_METRICS_PREFIX", None, "false, ie no prefix"),
        flag("experimental_remote_asset_api", B,
             "Whether to enable the experimental remote asset API implementation.",
             "BAZEL_REMOTE_EXPERIMENTAL_REMOTE_ASSET_API", None,
             "false, ie disable remote asset API"),
        flag("access_log_level", S,
             'The access logger verbosity level. If supplied, must be one of "none" or "all".',
             "BAZEL_REMOTE_ACCESS_LOG_LEVEL", "all", "all, ie enable full access logging"),
        flag("log_timezone", S,
             'The timezone to use for log timestamps. If supplied, must be one of "UTC", '
             '"local" or "none" for no timestamps.',
             "BAZEL_REMOTE_LOG_TIMEZONE", "UTC", "UTC, ie use UTC timezone"),
    ]


def find_flag(flags: Sequence[Flag], name: str) -> Optional[Flag]:
    """Return the flag called name, or None."""
    return next((f for f in flags if f.name == name), None)