from hatchplan.services.runs import RunService

__all__ = ["RunService"]
