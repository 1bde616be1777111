"""
barometer_service

Streams barometric pressure readings to a single connected peer as
checksummed PBARO sentences.
"""

PACKAGE_LOGGER_NAME = "barometer_service"
