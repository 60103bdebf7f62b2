# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Download strategies for pkgboot.

This package provides a pluggable strategy pattern for finding the latest
version of a tool and installing its executable. Each configured source
(``sources[].type`` in the configuration) maps to one registered strategy.

Available Strategies:
    github : GithubStrategy
        Release tags from the GitHub API; assets from release downloads.
    nuget : NugetStrategy
        Version list and .nupkg packages from a NuGet v2 feed.
    local : LocalFeedStrategy
        .nupkg files in a folder; no network access.

Sources are tried in configuration order by StrategyChain; when one fails
with a StrategyError the next one takes over.

Example:
    ```python
    from pathlib import Path
    from pkgboot.strategies import PackageSpec, StrategyChain, get_strategy

    package = PackageSpec(id="Paket", executable="paket.exe")
    chain = StrategyChain([
        get_strategy("github", {"repo": "fsprojects/Paket"},
                     package=package, work_dir=Path(".paket")),
        get_strategy("nuget", {}, package=package, work_dir=Path(".paket")),
    ])
    print(chain.get_latest_version(ignore_prerelease=True))
    ```

"""

# Import strategy modules to trigger self-registration
from . import (
    github,  # noqa: F401
    local,  # noqa: F401
    nuget,  # noqa: F401
)
from .base import (
    FetchStrategy,
    PackageSpec,
    available_strategies,
    get_strategy,
    register_strategy,
)
from .chain import StrategyChain, run_with_fallback

__all__ = [
    "FetchStrategy",
    "PackageSpec",
    "StrategyChain",
    "available_strategies",
    "get_strategy",
    "register_strategy",
    "run_with_fallback",
]
