from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import yaml, pathlib

class Options(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    teamcity: bool = Field(False, description="Emit ##teamcity[...] service messages")
    labels: bool = Field(False, description="Print a '***** <name>' line as each test starts")
    strict: bool = Field(False, description="Raise on bad reports instead of logging and skipping them")

def load_config(path: Optional[str] = None) -> Options:
    if path is None:
        return Options()
    data = yaml.safe_load(pathlib.Path(path).read_text()) or {}
    return Options.model_validate(data)
