"""API schema package — request/response models, one module per router."""
