class JinplateError(Exception):
    # base exception for all application-specific errors.
    # metrics of the run that raised it, when raised from TemplateRunner.run.
    metrics = None

class ConfigError(JinplateError):
    # invalid option combinations, bad declarations or config files.
    pass

class SourceNotFoundError(JinplateError):
    # an aliased template path does not exist.
    pass

class DiscoveryError(JinplateError):
    # errors while listing or reading template sources.
    pass

class NamingError(JinplateError):
    # the output-map template failed for a given input.

    def __init__(self, message: str, in_path: str = "", context_keys=None):
        super().__init__(message)
        self.in_path = in_path
        self.context_keys = list(context_keys or [])

class DataSourceError(JinplateError):
    # unknown alias, unsupported scheme, or fetch/parse failure.
    pass

class TemplateError(JinplateError):
    # a template failed to compile or execute.

    def __init__(self, message: str, template_name: str = ""):
        super().__init__(message)
        self.template_name = template_name

class OutputError(JinplateError):
    # errors opening or writing an output destination.
    pass

class ExecError(JinplateError):
    # the post-render command could not be started.
    pass
