# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base model for API payloads.

Upstream payloads are not contractually stable: per-record fields are
sometimes omitted or null, and new fields appear without notice. Models
therefore keep only the fields that identify a record as required, default
everything else to ``None``, and keep unknown fields as extras.
"""

from pydantic import BaseModel, ConfigDict


class FinnhubModel(BaseModel):
    """
    Common configuration for every response model.

    - Wire names (``c``, ``marketCapitalization``) are declared as aliases;
      Python names are accepted too.
    - Unknown fields are kept and available through ``model_extra``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )
