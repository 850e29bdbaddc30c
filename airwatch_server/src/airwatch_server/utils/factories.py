import factory
from airwatch_core.domain.models import AQIReading, DeviceReading


class AQIReadingFactory(factory.Factory):
    class Meta:
        model = AQIReading

    location = factory.Sequence(lambda n: f"City {n}")
    aqi = 80
    pm25 = 24.0
    pm10 = 40.0
    co = 0.8
    o3 = 64.0
    no2 = 32.0
    so2 = 12.0
    temperature = 27.0
    humidity = 60.0
    wind_speed = 10.0
    source = "mock"


class DeviceReadingFactory(factory.Factory):
    class Meta:
        model = DeviceReading

    device_id = factory.Sequence(lambda n: f"dev-{n}")
    location = "Test City"
    pm25 = 40.0
    pm10 = 70.0
    temperature = 28.0
    humidity = 60.0
    battery_level = 80.0
    signal_strength = 75.0
