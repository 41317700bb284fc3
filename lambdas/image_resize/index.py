"""
AWS Lambda function that creates resized image derivatives on demand.
"""

# Import the Lambda handler from handlers module
from handlers import lambda_handler

# Re-export the lambda_handler function
__all__ = ["lambda_handler"]
