def aqi_deduction(aqi: float) -> int:
    if aqi > 200:
        return 50
    if aqi > 150:
        return 35
    if aqi > 100:
        return 20
    if aqi > 50:
        return 10
    return 0


def crime_deduction(crime_rate: float) -> int:
    if crime_rate > 1000:
        return 30
    if crime_rate > 500:
        return 20
    if crime_rate > 300:
        return 10
    if crime_rate > 150:
        return 5
    return 0


def temperature_deduction(temperature: float) -> int:
    if temperature > 40 or temperature < 10:
        return 20
    if temperature > 35 or temperature < 15:
        return 10
    return 0


def calculate_city_health_index(aqi: float, crime_rate: float, temperature: float) -> int:
    """
    Compute the city health index (0-100).

    Starts at 100 and subtracts penalties for air quality (up to 50),
    crime (up to 30) and temperature extremes (up to 20).

    Args:
        aqi: current air quality index
        crime_rate: crimes per 100k population
        temperature: current temperature in Celsius

    Returns:
        index clamped to [0, 100]
    """
    index = 100
    index -= aqi_deduction(aqi)
    index -= crime_deduction(crime_rate)
    index -= temperature_deduction(temperature)
    return max(0, min(100, index))
