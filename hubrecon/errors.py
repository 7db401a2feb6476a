#!/usr/bin/env python3


class ReconciliationError(Exception):
    """Base class for errors raised while reconciling the two reports."""


class MissingRequiredColumn(ReconciliationError):
    """A required header could not be located in one of the sources."""

    def __init__(self, source, column_name, suggestion=None):
        self.source = source
        self.column_name = column_name
        self.suggestion = suggestion
        message = f"Missing required column '{column_name}' in {source}"
        if suggestion:
            message += f" (closest header: '{suggestion}')"
        super().__init__(message)


class EmptyOrUnreadableSheet(ReconciliationError):
    """The sheet has no header row, no data, or could not be read at all."""

    def __init__(self, source, reason=""):
        self.source = source
        self.reason = reason
        message = f"Empty or unreadable sheet in {source}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class AmbiguousColumn(ReconciliationError):
    """More than one header could be the required column."""

    def __init__(self, source, column_name, headers):
        self.source = source
        self.column_name = column_name
        self.headers = list(headers)
        super().__init__(f"Ambiguous column '{column_name}' in {source}: headers {self.headers}")


class DateParseFailure(ValueError):
    def __init__(self, raw_value):
        self.raw_value = raw_value
        super().__init__(f"Unparseable date: {raw_value!r}")


class AmountParseFailure(ValueError):
    def __init__(self, raw_value):
        self.raw_value = raw_value
        super().__init__(f"Unparseable amount: {raw_value!r}")