"""
stack_deploy — Backend build, Terraform apply, and frontend publish in one run.

Every meaningful action is delegated to an external tool (the backend
packaging command, terraform, npm, aws). This package only sequences them,
checks their exit status and validates the values read back from Terraform.
"""

from stack_deploy.dirstack import DirectoryStack
from stack_deploy.exceptions import DeployError, ExecutionFailure, InvalidOutput, MissingOutput
from stack_deploy.models import CommandInvocation, Environment, OutputValue, RunConfig
from stack_deploy.outputs import OutputReader, validate_output
from stack_deploy.runner import CommandRunner

__all__ = [
    "CommandInvocation",
    "CommandRunner",
    "DeployError",
    "DirectoryStack",
    "Environment",
    "ExecutionFailure",
    "InvalidOutput",
    "MissingOutput",
    "OutputReader",
    "OutputValue",
    "RunConfig",
    "validate_output",
]
