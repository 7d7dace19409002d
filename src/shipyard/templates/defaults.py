# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/templates/defaults.py

# Rendered by helm against the values produced by shipyard.chart.
DEPLOYMENT_YAML = """\
{{- range $i, $deployment := .Values.app.deployments }}
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: {{ $.Values.app.name }}-{{ $deployment.version | default $i }}
  labels:
    shipyard.io/app-name: {{ $.Values.app.name | quote }}
    shipyard.io/pool: {{ $.Values.app.pool | quote }}
spec:
  replicas: {{ $deployment.units | default 1 }}
  selector:
    matchLabels:
      shipyard.io/app-name: {{ $.Values.app.name | quote }}
      shipyard.io/app-deployment-version: {{ $deployment.version | default $i | quote }}
  template:
    metadata:
      labels:
        shipyard.io/app-name: {{ $.Values.app.name | quote }}
        shipyard.io/app-deployment-version: {{ $deployment.version | default $i | quote }}
    spec:
      containers:
        - name: {{ $.Values.app.name }}
          image: {{ $deployment.image }}
          {{- with $deployment.env }}
          env:
            {{- toYaml . | nindent 12 }}
          {{- end }}
          {{- with $deployment.ports }}
          ports:
            {{- toYaml . | nindent 12 }}
          {{- end }}
{{- end }}
"""

SERVICE_YAML = """\
{{- range $i, $deployment := .Values.app.deployments }}
{{- if $deployment.ports }}
---
apiVersion: v1
kind: Service
metadata:
  name: {{ $.Values.app.name }}-{{ $deployment.version | default $i }}
  labels:
    shipyard.io/app-name: {{ $.Values.app.name | quote }}
spec:
  type: ClusterIP
  selector:
    shipyard.io/app-name: {{ $.Values.app.name | quote }}
    shipyard.io/app-deployment-version: {{ $deployment.version | default $i | quote }}
  ports:
  {{- range $deployment.ports }}
    - port: {{ .containerPort }}
      targetPort: {{ .containerPort }}
      protocol: {{ .protocol | default "TCP" }}
  {{- end }}
{{- end }}
{{- end }}
"""

# Only for deployments that carry an "ingress" block with a host.
INGRESS_YAML = """\
{{- range $i, $deployment := .Values.app.deployments }}
{{- with $deployment.ingress }}
{{- $port := .port | default (index $deployment.ports 0).containerPort }}
---
apiVersion: networking.k8s.io/v1
kind: Ingress
metadata:
  name: {{ $.Values.app.name }}-{{ $deployment.version | default $i }}
  labels:
    shipyard.io/app-name: {{ $.Values.app.name | quote }}
  {{- with .annotations }}
  annotations:
    {{- toYaml . | nindent 4 }}
  {{- end }}
spec:
  {{- with .className }}
  ingressClassName: {{ . }}
  {{- end }}
  rules:
    - host: {{ .host | quote }}
      http:
        paths:
          - path: {{ .path | default "/" }}
            pathType: Prefix
            backend:
              service:
                name: {{ $.Values.app.name }}-{{ $deployment.version | default $i }}
                port:
                  number: {{ $port }}
{{- end }}
{{- end }}
"""

DEFAULT_YAMLS = {
    "deployment.yaml": DEPLOYMENT_YAML,
    "service.yaml": SERVICE_YAML,
    "ingress.yaml": INGRESS_YAML,
}
