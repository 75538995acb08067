"""HTTP API layer built on FastAPI.

- **main**: Application factory and lifecycle management
- **routes**: Pricing endpoints
- **dependencies**: Injection of the configuration store and span reporter
- **middleware**: Correlation IDs, request logging and error handling
- **schemas**: Pydantic response models
- **utils**: orjson response class
"""
