"""
Configuration subsystem for Starfall.

- **config.py**: static configuration from environment variables (.env)
- **manager.py**: game tuning values from YAML, read by dot-notation

`ConfigManager` logs through the logging subsystem, which itself reads
`Config`; import it from `starfall.core.config.manager` directly.

Usage
-----
```python
from starfall.core.config import Config
from starfall.core.config.manager import ConfigManager

title_id = Config.PLAYFAB_TITLE_ID

config = ConfigManager()
config.load()
starting_hp = config.get("progression.starting_hp", 100)
```
"""

from starfall.core.config.config import Config, Environment

__all__ = [
    "Config",
    "Environment",
]
