"""
Custom Exception Hierarchy - Domain-specific error types

Provides typed exceptions for the failure modes of plugin discovery,
plugin loading, provider fetches and storage.
All custom exceptions inherit from CivicSyncError for easy catching.

Design Philosophy:
- Exceptions are data: Include context for debugging
- Fail explicitly: Better to raise specific exception than generic
- Catch specifically: Handler can distinguish error types
- Log contextually: Exception attributes enable rich logging
"""

from typing import Optional, Dict, Any


class CivicSyncError(Exception):
    """Base exception for all civicsync errors

    All custom exceptions inherit from this, enabling:
    - Catch all civicsync errors with single except clause
    - Distinguish our errors from library errors
    - Add common attributes (context, original_error)
    - Check if error is retryable via is_retryable property
    """

    # Default: errors are not retryable (permanent failure)
    _retryable: bool = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Check if this error represents a transient failure that should be retried.

        Returns:
            True for transient failures (network, upstream outages)
            False for permanent failures (parse errors, validation, bad config)
        """
        return self._retryable

    def __str__(self):
        base_msg = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


# ========== Database Errors ==========


class DatabaseError(CivicSyncError):
    """Database operation failures

    Examples:
    - Query errors
    - Transaction rollbacks
    - Data integrity violations
    """
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to establish or maintain database connection"""
    _retryable = True


# ========== Region Plugin Errors ==========


class PluginError(CivicSyncError):
    """Region plugin failures

    Includes context about which plugin and registry slot failed.
    """

    def __init__(
        self,
        message: str,
        plugin: Optional[str] = None,
        slot: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.plugin = plugin
        self.slot = slot
        self.original_error = original_error

        context = {}
        if plugin:
            context['plugin'] = plugin
        if slot:
            context['slot'] = slot
        if original_error:
            context['original_error'] = str(original_error)

        super().__init__(message, context)


class PluginLoadError(PluginError):
    """Plugin could not be instantiated or initialized

    Examples:
    - Scraping pipeline service not available
    - Config lacks regionId or dataSources
    - initialize() raised
    """
    pass


class FetchFailure(CivicSyncError):
    """A provider rejected a fetch call for one data type

    Caught per data type by the sync engine and downgraded to an error
    string on the SyncResult.
    """

    _retryable = True

    def __init__(self, plugin: str, data_type: str, original_error: Exception):
        self.plugin = plugin
        self.data_type = data_type
        self.original_error = original_error
        super().__init__(
            f"Region data fetch failed in {plugin} for {data_type}: {original_error}"
        )


# ========== Parsing Errors ==========


class ParseError(CivicSyncError):
    """Malformed file or payload content

    Examples:
    - Region descriptor is not valid JSON
    """

    def __init__(
        self,
        message: str,
        parser_type: Optional[str] = None,
        source: Optional[str] = None
    ):
        self.parser_type = parser_type
        self.source = source

        context = {}
        if parser_type:
            context['parser_type'] = parser_type
        if source:
            context['source'] = source

        super().__init__(message, context)


# ========== Configuration Errors ==========


class ConfigurationError(CivicSyncError):
    """Configuration or environment errors

    Examples:
    - No local region plugin available after bootstrap
    - Invalid configuration value
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        context = {}
        if config_key:
            context['config_key'] = config_key
        super().__init__(message, context)


# ========== Validation Errors ==========


class ValidationError(CivicSyncError):
    """Data validation failures

    Examples:
    - Region descriptor missing a required field
    - Data source with an unknown dataType
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        file: Optional[str] = None,
    ):
        self.field = field
        self.value = value
        self.file = file

        context = {}
        if file:
            context['file'] = file
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)

        super().__init__(message, context)
