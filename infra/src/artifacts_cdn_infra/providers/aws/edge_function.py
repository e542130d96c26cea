"""AWS Lambda@Edge function deployed from a local source directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pulumi
import pulumi_aws as aws

logger: logging.Logger = logging.getLogger(__name__)

# Lambda@Edge functions must live in us-east-1 and viewer triggers are capped
# at 128 MB and 5 seconds on x86_64.
EDGE_REGION = "us-east-1"
EDGE_MEMORY_MB = 128
EDGE_TIMEOUT_SECONDS = 5
EDGE_ARCHITECTURE = "x86_64"
EDGE_RUNTIME = "python3.12"

_BASIC_EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"


class EdgeFunctionArtifactError(FileNotFoundError):
    """Raised when the edge function source cannot be located."""


class AwsEdgeFunctionArgs:
    """Arguments for the Lambda@Edge function component."""

    def __init__(
        self,
        source_dir: Path,
        handler_module: str = "cf_url_rewriter",
        handler_function: str = "handler",
    ) -> None:
        self.source_dir: Path = Path(source_dir)
        self.handler_module: str = handler_module
        self.handler_function: str = handler_function

    @property
    def handler(self) -> str:
        return f"{self.handler_module}.{self.handler_function}"

    @property
    def module_path(self) -> Path:
        return self.source_dir / f"{self.handler_module}.py"

    def archive(self) -> pulumi.AssetArchive:
        """Return a deployment archive holding only the handler module."""
        return pulumi.AssetArchive(
            {self.module_path.name: pulumi.FileAsset(str(self.module_path))}
        )

    def validate(self) -> None:
        """Check the source directory holds the handler module.

        Raises:
            EdgeFunctionArtifactError: The directory or module is missing.
        """
        if not self.module_path.is_file():
            raise EdgeFunctionArtifactError(
                f"Edge function handler not found: {self.module_path}"
            )


class AwsEdgeFunctionOutputs:
    """Resolved outputs from the edge function component."""

    def __init__(
        self,
        version_arn: pulumi.Output[str],
        function_name: pulumi.Output[str],
    ) -> None:
        self.version_arn: pulumi.Output[str] = version_arn
        self.function_name: pulumi.Output[str] = function_name


class AwsEdgeFunction(pulumi.ComponentResource):
    """Versioned Lambda function suitable for a CloudFront trigger.

    ``publish=True`` makes every code change produce a new numbered version,
    and ``version_arn`` always names that version rather than ``$LATEST``.
    """

    def __init__(
        self,
        name: str,
        args: AwsEdgeFunctionArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """Declare the role and published function in the edge region.

        Args:
            name: Logical Pulumi resource name.
            args: Handler module location and entry point.
            opts: Optional Pulumi resource options.

        Raises:
            EdgeFunctionArtifactError: The handler module is missing.
        """
        args.validate()
        super().__init__("artifacts-cdn:aws:EdgeFunction", name, {}, opts)

        logger.debug(
            "provisioning_aws_edge_function",
            extra={"name": name, "source_dir": str(args.source_dir), "handler": args.handler},
        )

        edge_provider = aws.Provider(
            f"{name}-{EDGE_REGION}",
            aws.ProviderArgs(region=EDGE_REGION),
            opts=pulumi.ResourceOptions(parent=self),
        )

        role = aws.iam.Role(
            f"{name}-role",
            aws.iam.RoleArgs(
                assume_role_policy=json.dumps(
                    {
                        "Version": "2012-10-17",
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Principal": {
                                    "Service": [
                                        "lambda.amazonaws.com",
                                        "edgelambda.amazonaws.com",
                                    ]
                                },
                                "Action": "sts:AssumeRole",
                            }
                        ],
                    }
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        basic_exec = aws.iam.RolePolicyAttachment(
            f"{name}-basic-exec",
            aws.iam.RolePolicyAttachmentArgs(
                role=role.name,
                policy_arn=_BASIC_EXECUTION_POLICY_ARN,
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

        function = aws.lambda_.Function(
            f"{name}-fn",
            aws.lambda_.FunctionArgs(
                role=role.arn,
                runtime=EDGE_RUNTIME,
                handler=args.handler,
                code=args.archive(),
                memory_size=EDGE_MEMORY_MB,
                timeout=EDGE_TIMEOUT_SECONDS,
                architectures=[EDGE_ARCHITECTURE],
                publish=True,
            ),
            opts=pulumi.ResourceOptions(
                parent=self, provider=edge_provider, depends_on=[basic_exec]
            ),
        )

        self._outputs: AwsEdgeFunctionOutputs = AwsEdgeFunctionOutputs(
            version_arn=function.qualified_arn,
            function_name=function.name,
        )
        self.register_outputs(
            {
                "version_arn": self._outputs.version_arn,
                "function_name": self._outputs.function_name,
            }
        )

    @property
    def outputs(self) -> AwsEdgeFunctionOutputs:
        """Return the resolved edge function outputs."""
        return self._outputs
