from tfe.resources.ip_ranges import IPRanges
from tfe.resources.organizations import Organizations
from tfe.resources.workspaces import Workspaces

__all__ = ["IPRanges", "Organizations", "Workspaces"]
