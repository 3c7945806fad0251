"""Constants for the resource apply library."""

import os

# Controller identity used in events and structured logs
CONTROLLER_NAME = "resource-apply"

# Admission registration API
ADMISSION_GROUP = "admissionregistration.k8s.io"
ADMISSION_VERSION = "v1"
ADMISSION_API_VERSION = f"{ADMISSION_GROUP}/{ADMISSION_VERSION}"

# Resource Kinds
KIND_MUTATING_WEBHOOK_CONFIGURATION = "MutatingWebhookConfiguration"
KIND_VALIDATING_WEBHOOK_CONFIGURATION = "ValidatingWebhookConfiguration"

# Resource plurals
PLURAL_MUTATING_WEBHOOK_CONFIGURATIONS = "mutatingwebhookconfigurations"
PLURAL_VALIDATING_WEBHOOK_CONFIGURATIONS = "validatingwebhookconfigurations"

# Annotations
ANNOTATION_SPEC_HASH = os.getenv("SPEC_HASH_ANNOTATION", "operator.openshift.io/spec-hash")

# Field holding the caller-owned payload of a generic object
SPEC_FIELD = "spec"
WEBHOOKS_FIELD = "webhooks"

# Event types
EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

# Apply operations (metric label values)
OPERATION_CREATE = "create"
OPERATION_UPDATE = "update"
OPERATION_NOOP = "noop"
