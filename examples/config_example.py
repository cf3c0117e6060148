"""
Configuration example for pincontrol
Loads a board description from YAML, validates it and runs the controllers
"""

import asyncio
import logging
from pathlib import Path
from pincontrol import PinManager
from pincontrol.config import build_device, load_config, parse_config
from pincontrol.validation import validate_pin_config

# Enable logging
logging.basicConfig(level=logging.INFO)

CONFIG_PATH = Path(__file__).parent / "board.yaml"

async def main():
    config = load_config(CONFIG_PATH)

    is_valid, issues = validate_pin_config(config)
    for issue in issues:
        print(f"[{issue.level.value}] {issue.path}: {issue.message}")
    if not is_valid:
        print("Configuration INVALID")
        return

    board = parse_config(config)
    device = build_device(board.device)
    manager = PinManager(device)

    if not await manager.configure_from_dict(config):
        print("Configuration failed")
        return

    async def on_change(change):
        print(f"{change.name}: {change.state}")

    manager.on_change(on_change)
    await manager.start()
    print(f"Controllers: {manager.get_status()}")

    # The simulated device lets us flip inputs by hand
    await device.set_input(3, True)
    await asyncio.sleep(1)
    await device.set_input(3, False)

    await manager.stop()
    await device.close()

if __name__ == "__main__":
    asyncio.run(main())
