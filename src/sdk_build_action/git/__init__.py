from sdk_build_action.git.repo import GitRepo

__all__ = ["GitRepo"]
