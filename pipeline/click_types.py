"""Click Custom Types for Pipeline CLI

Validates arguments at parse time with clear error messages.
"""

import click

from regions.types import DataType


class DataTypeParam(click.ParamType):
    """Civic data type: propositions, meetings, representatives, campaign_finance

    Accepts hyphens for underscores (campaign-finance) and any case.
    """

    name = "data_type"

    def convert(self, value, param, ctx):
        if isinstance(value, DataType):
            return value
        if not value:
            self.fail("data type cannot be empty", param, ctx)

        normalized = value.strip().lower().replace("-", "_")
        try:
            return DataType(normalized)
        except ValueError:
            choices = ", ".join(dt.value for dt in DataType)
            self.fail(f"{value!r} is not a data type. Choose from: {choices}", param, ctx)


DATA_TYPE = DataTypeParam()
