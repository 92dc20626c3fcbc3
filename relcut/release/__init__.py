"""Release bounded context.

- semver / planner: version arithmetic and the next-version decision
- changelog / version_file: the local document rewrites
- context: resolution of settings into a frozen ReleaseContext
- hooks / assets: templated commands and asset globs
- pipeline: ordered stages from precheck to publication
"""

from __future__ import annotations
