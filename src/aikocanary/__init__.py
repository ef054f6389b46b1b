__app_name__ = "AikoCanary"
__version__ = "0.1.0"
