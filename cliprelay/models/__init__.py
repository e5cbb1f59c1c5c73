"""
Data models of the relay pipeline
"""
from .request_context import RequestContext
from .artifact_paths import ArtifactPaths
from .bitrate_plan import BitratePlan, plan_bitrate
from .relay_response import RelayResponse

__all__ = ['RequestContext', 'ArtifactPaths', 'BitratePlan', 'plan_bitrate', 'RelayResponse']
