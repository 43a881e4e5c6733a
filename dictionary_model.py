from typing import Dict

from pydantic import BaseModel, ConfigDict, StrictStr


class DictionaryModel(BaseModel):
    """Schema of a dictionary blob: Dictionary(words: {"key": "text", ...})"""
    model_config = ConfigDict(extra="ignore")

    words: Dict[StrictStr, StrictStr]
