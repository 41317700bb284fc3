"""
Image Resize Stack.

Deploys the on-demand resize function together with the bucket it reads
originals from and writes derivatives to:
- S3 bucket for `assets/...` originals and `resize/...` derivatives
- Lambda function built from lambdas/image_resize
- REST API exposing GET /resize?key=...
"""

import os
from dataclasses import dataclass

from aws_cdk import CfnOutput, Duration, RemovalPolicy, Stack
from aws_cdk import aws_apigateway as apigateway
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_logs as logs
from aws_cdk import aws_s3 as s3
from constructs import Construct

from cdk_logger import get_logger
from image_resize_stacks.stack_config import CDKConfig

_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LAMBDA_ENTRY = os.path.join(_ROOT, "lambdas", "image_resize")

POWERTOOLS_LAYER_ARN = (
    "arn:{partition}:lambda:{region}:017000801446:layer:"
    "AWSLambdaPowertoolsPythonV3-python312-x86_64:4"
)

logger = get_logger("ImageResizeStack")


@dataclass
class ImageResizeStackProps:
    """Configuration for the Image Resize Stack."""

    config: CDKConfig


class ImageResizeStack(Stack):
    def __init__(
        self, scope: Construct, id: str, props: ImageResizeStackProps, **kwargs
    ):
        super().__init__(scope, id, **kwargs)

        config = props.config
        resize = config.resize
        destroy = config.environment != "prod"

        self._bucket = s3.Bucket(
            self,
            "ImageBucket",
            bucket_name=config.bucket_name,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.DESTROY if destroy else RemovalPolicy.RETAIN,
            auto_delete_objects=destroy,
        )

        function_name = f"{config.resource_prefix}_image_resize_{config.environment}"
        log_group = logs.LogGroup(
            self,
            "ImageResizeLogGroup",
            log_group_name=f"/aws/lambda/{function_name}",
            retention=config.logging.cloudwatch_retention,
            removal_policy=RemovalPolicy.DESTROY if destroy else RemovalPolicy.RETAIN,
        )

        layers = [
            lambda_.LayerVersion.from_layer_version_arn(
                self,
                "PowertoolsLayer",
                POWERTOOLS_LAYER_ARN.format(
                    partition=self.partition, region=self.region
                ),
            )
        ]
        if resize.pillow_layer_arn:
            layers.append(
                lambda_.LayerVersion.from_layer_version_arn(
                    self, "PillowLayer", resize.pillow_layer_arn
                )
            )
        else:
            logger.warning(
                "No pillow_layer_arn configured; the function package must bundle Pillow"
            )

        # Path-style presigned URLs are served from the regional endpoint
        redirect_base_url = (
            resize.redirect_base_url or f"https://s3.{self.region}.amazonaws.com"
        )
        environment = {
            "BUCKET": self._bucket.bucket_name,
            "ALLOWED_DIMENSIONS": ",".join(resize.allowed_dimensions),
            "RESPONSE_MODE": resize.response_mode,
            "KEY_GRAMMAR": resize.key_grammar,
            "PRESIGNED_EXPIRATION_SECONDS": str(resize.presigned_expiration_seconds),
            "REDIRECT_BASE_URL": redirect_base_url,
            "LOG_LEVEL": config.logging.level,
            "POWERTOOLS_SERVICE_NAME": "image-resize",
            "POWERTOOLS_METRICS_NAMESPACE": config.resource_prefix,
        }
        if resize.base_url:
            environment["URL"] = resize.base_url

        logger.info(
            f"Creating resize function {function_name} "
            f"({resize.response_mode} responses, {resize.key_grammar} keys)"
        )
        self._function = lambda_.Function(
            self,
            "ImageResizeFunction",
            function_name=function_name,
            runtime=lambda_.Runtime.PYTHON_3_12,
            architecture=lambda_.Architecture.X86_64,
            handler="index.lambda_handler",
            code=lambda_.Code.from_asset(
                LAMBDA_ENTRY, exclude=["tests", "__pycache__", "*.pyc"]
            ),
            memory_size=resize.memory_size,
            timeout=Duration.seconds(resize.timeout_seconds),
            tracing=lambda_.Tracing.ACTIVE,
            layers=layers,
            environment=environment,
            log_group=log_group,
        )
        self._bucket.grant_read_write(self._function)

        self._api = apigateway.RestApi(
            self,
            "ImageResizeApi",
            rest_api_name=f"{config.resource_prefix}-image-resize-{config.environment}",
            description="On-demand image resizing",
            deploy_options=apigateway.StageOptions(stage_name=config.environment),
        )
        resize_resource = self._api.root.add_resource("resize")
        resize_resource.add_method(
            "GET",
            apigateway.LambdaIntegration(self._function, proxy=True),
            # Missing keys are answered by the function as InvalidResizePath
            request_parameters={"method.request.querystring.key": False},
        )

        CfnOutput(self, "ImageBucketName", value=self._bucket.bucket_name)
        CfnOutput(self, "ResizeEndpoint", value=f"{self._api.url}resize")

    @property
    def bucket(self) -> s3.IBucket:
        return self._bucket

    @property
    def function(self) -> lambda_.IFunction:
        return self._function

    @property
    def api(self) -> apigateway.RestApi:
        return self._api
