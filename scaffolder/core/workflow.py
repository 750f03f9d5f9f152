from enum import Enum

class PipelineStage(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    DERIVING = "DERIVING"
    RENDERING = "RENDERING"
    MERGING = "MERGING"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    FAILED = "FAILED"

class JakartaVersion(str, Enum):
    JAKARTA_10 = "10"
    JAKARTA_11 = "11"

    @classmethod
    def parse(cls, value: str) -> "JakartaVersion":
        # accept "10", "10.0.0", "11.0.0-M1" ...
        major = str(value).strip().split(".")[0]
        return cls(major)
