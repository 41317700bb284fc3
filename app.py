#!/usr/bin/env python3
"""Entry point for the Image Resize CDK application."""
import aws_cdk as cdk

from cdk_logger import CDKLogger, get_logger
from image_resize_stacks.image_resize_stack import (
    ImageResizeStack,
    ImageResizeStackProps,
)
from image_resize_stacks.stack_config import CDKConfig

config = CDKConfig.load_from_file()

CDKLogger.set_level(config.logging.level)
logger = get_logger("CDKApp")
logger.info(f"Initializing Image Resize CDK App with log level: {config.logging.level}")

app = cdk.App()

env = cdk.Environment(account=config.account_id, region=config.primary_region)

ImageResizeStack(
    app,
    f"{config.resource_prefix}-image-resize-{config.environment}",
    props=ImageResizeStackProps(config=config),
    env=env,
    description="On-demand image resizing backed by S3",
)

app.synth()
