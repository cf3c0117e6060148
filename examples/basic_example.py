import asyncio
import logging
from pincontrol import BlinkingPinController, InputPinController, SimulatedPinDevice

# Enable logging to see what's happening
logging.basicConfig(level=logging.INFO)

async def main():
    """Blink an LED and watch a bouncing button on a simulated board"""
    print("Testing pincontrol Package")

    device = SimulatedPinDevice("bench")
    await device.initialize()

    # Blink output 0 every 100ms
    led = BlinkingPinController(device, output_pin=0, interval=100)
    await led.start()
    print(f"LED controller: {led.status.value}")

    # Debounced button on input 3
    button = await InputPinController.create(device, input_pin=3, gate_duration=20)

    def on_button(change):
        print(f"Button (pin {change.pin}): {'pressed' if change.state else 'released'}")

    button.on_change(on_button)

    # Simulate a bouncing press followed by a clean release
    print("\n Simulating a bouncing press...")
    for _ in range(5):
        await device.set_input(3, True)
        await device.set_input(3, False)
    await asyncio.sleep(0.05)
    await device.set_input(3, True)
    await asyncio.sleep(0.5)
    await device.set_input(3, False)

    print("\n Device Metrics:")
    print(f"Writes: {device.metrics.write_count}")
    print(f"Avg Write Time: {device.metrics.avg_write_time_ms:.2f}ms")
    print(f"Errors: {device.metrics.error_count}")

    # Clean shutdown
    button.close()
    await led.stop()
    print(f"LED controller: {led.status.value}")
    await device.close()

if __name__ == "__main__":
    asyncio.run(main())
