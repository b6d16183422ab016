class SparkMonitoringError(Exception):
    """Base class for every error surfaced to the notebook as an ``ERROR`` result."""

    with_help = False


class MalformedCommand(SparkMonitoringError):
    with_help = True


class UnknownProfile(SparkMonitoringError):
    with_help = True


class UnknownCommand(SparkMonitoringError):
    with_help = True


class UpstreamUnavailable(SparkMonitoringError):
    pass


class TransportError(SparkMonitoringError):
    pass
