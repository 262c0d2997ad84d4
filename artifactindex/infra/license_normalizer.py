"""License normalization for artifactindex."""

import re
from typing import Dict, Iterable, List, Optional

from ..domain import License, RawLicense

# Lower-cased, whitespace-collapsed alias -> (short name, canonical name)
DEFAULT_ALIASES: Dict[str, tuple] = {
    'apache-2.0': ('Apache-2.0', 'Apache License 2.0'),
    'apache 2': ('Apache-2.0', 'Apache License 2.0'),
    'apache 2.0': ('Apache-2.0', 'Apache License 2.0'),
    'apache license 2.0': ('Apache-2.0', 'Apache License 2.0'),
    'apache license, version 2.0': ('Apache-2.0', 'Apache License 2.0'),
    'the apache software license, version 2.0': ('Apache-2.0', 'Apache License 2.0'),
    'the apache license, version 2.0': ('Apache-2.0', 'Apache License 2.0'),
    'mit': ('MIT', 'MIT License'),
    'mit license': ('MIT', 'MIT License'),
    'the mit license': ('MIT', 'MIT License'),
    'bsd-3-clause': ('BSD-3-Clause', 'BSD 3-Clause "New" or "Revised" License'),
    'bsd 3-clause': ('BSD-3-Clause', 'BSD 3-Clause "New" or "Revised" License'),
    'new bsd license': ('BSD-3-Clause', 'BSD 3-Clause "New" or "Revised" License'),
    'bsd-2-clause': ('BSD-2-Clause', 'BSD 2-Clause "Simplified" License'),
    'epl-1.0': ('EPL-1.0', 'Eclipse Public License 1.0'),
    'eclipse public license - v 1.0': ('EPL-1.0', 'Eclipse Public License 1.0'),
    'epl-2.0': ('EPL-2.0', 'Eclipse Public License 2.0'),
    'mpl-2.0': ('MPL-2.0', 'Mozilla Public License 2.0'),
    'lgpl-3.0': ('LGPL-3.0', 'GNU Lesser General Public License v3.0'),
    'gpl-3.0': ('GPL-3.0', 'GNU General Public License v3.0'),
}


def _key(name: str) -> str:
    return re.sub(r'\s+', ' ', name.strip().lower())


class LicenseNormalizer:
    """
    Maps declared license names to normalized licenses.

    Unknown names are kept as-is (short name = declared name). The result
    is deduplicated by short name and sorted.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        """
        Args:
            aliases: Extra "declared name" -> "short name" mappings from config
        """
        self.aliases = dict(DEFAULT_ALIASES)
        canonical = {short: name for short, name in DEFAULT_ALIASES.values()}
        for alias, short in (aliases or {}).items():
            self.aliases[_key(alias)] = (short, canonical.get(short, short))

    def normalize(self, licenses: Iterable[RawLicense]) -> List[License]:
        result: Dict[str, License] = {}
        for raw in licenses:
            short, name = self.aliases.get(_key(raw.name), (raw.name.strip(), raw.name.strip()))
            if short not in result:
                result[short] = License(name=name, short_name=short, url=raw.url)
        return [result[short] for short in sorted(result)]
