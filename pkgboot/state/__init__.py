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

"""Install state for pkgboot.

The state file remembers the version installed at each target so repeated
runs skip downloads that would not change anything. State tracking is on by
default and can be disabled with ``--stateless``.

Public API:

- StateTracker: Main interface for state management operations
- load_state: Load state from JSON file
- save_state: Save state to JSON file with pretty-printing

"""

from .tracker import StateTracker, create_default_state, load_state, save_state

__all__ = ["StateTracker", "create_default_state", "load_state", "save_state"]
