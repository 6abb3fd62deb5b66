"""Interactive git branch cleanup tool.

Features:
- List local and remote-tracking branches grouped by origin or by age
- Curate the branches to keep in your own editor
- Batched deletion of local branches and remote branches per remote
- Fetch-and-prune before listing, skippable for speed
- Dry run mode for rehearsing a cleanup
"""

__version__ = "0.1.0"
