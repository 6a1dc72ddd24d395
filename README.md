# kaitoctl

`kaitoctl` is a command-line tool for managing AI model inference and
fine-tuning workloads with the Kubernetes AI Toolchain Operator (Kaito).
It creates, inspects and deletes Kaito workspaces (`kaito.sh/v1beta1`).
It also prints the logs of the pods that a workspace runs.

## Installation

```
pip install kaitoctl
```

Two commands are installed. Both run the same program:

- `kubectl-kaito`: kubectl finds it as a plugin, so `kubectl kaito ...` works.
  Help and examples then show the program as `kubectl kaito`.
- `kaito`: the same tool under a standalone name.

## Connecting to the cluster

The connection comes from a kubeconfig file. The tool uses `--kubeconfig` if
you give it. Otherwise it takes the first existing file listed in
`KUBECONFIG`, and after that `~/.kube/config`. It uses the context named by
`--context`, or else the file's `current-context`. Bearer tokens, client
certificates and keys (as files or as `-data` entries), certificate
authorities, `insecure-skip-tls-verify` and username/password are read from
the kubeconfig.

These global options go before the command and override the kubeconfig:

| Option | Effect |
| --- | --- |
| `--kubeconfig PATH` | kubeconfig file to read |
| `--context NAME` | kubeconfig context to use |
| `-s`, `--server URL` | API server address; this also works without a kubeconfig |
| `--token TOKEN` | bearer token |
| `--certificate-authority PATH` | CA certificate file |
| `--insecure-skip-tls-verify` | do not verify the server certificate |
| `--request-timeout T` | per-request timeout such as `30`, `30s`, `5m` or `1h`; `0` means no timeout |
| `-n`, `--namespace NS` | namespace; used by `status` when `status` has no `-n` of its own |

## Commands

### deploy

This command creates a workspace for inference. `--name` and `--model` are
required. `--gpus` defaults to 1 and must be at least 1. `--preset` defaults
to `base`, and the inference preset becomes `<model>-<preset>`.
`--instance-type` defaults to `Standard_NC24ads_A100_v4`. `-n` defaults to
`default`. With `--dry-run` the tool prints the configuration and creates
nothing.

```
kubectl-kaito deploy --name workspace-llama-3 --model llama-3-8b-instruct --gpus 1 --preset instruct
kubectl-kaito deploy --name workspace-test --model llama-2-7b --dry-run
```

### tune

This command creates a fine-tuning workspace with one node. `--name`,
`--model` and `--dataset` are required. `--preset` defaults to `qlora`.
`--instance-type`, `-n` and `--dry-run` work as they do for `deploy`.

```
kubectl-kaito tune --name workspace-llama-2-tune --model llama-2-7b --dataset gs://teamA-ds --preset qlora
kubectl-kaito tune --name test-tune --model phi-2 --dataset gs://test-data --preset lora --dry-run
```

### status

This command shows one workspace, or lists workspaces as a table. The table
shows the instance type, the `ResourceReady`, `InferenceReady`, `JobStarted`
and `WorkspaceReady` conditions, and the age. A workspace may be written as
`name` or `workspace/name`. `-A`/`--all-namespaces` lists every namespace and
cannot be combined with `-n`. `-w`/`--watch` refreshes one workspace every
five seconds until you press Ctrl+C.

```
kubectl-kaito status workspace/workspace-llama-3
kubectl-kaito status
kubectl-kaito status --all-namespaces
kubectl-kaito status workspace-llama-3 --watch
```

### logs

This command prints the logs of the workspace's pods. It looks for pods
labelled `app=<name>`, then `workspace=<name>`, then
`kaito.sh/workspace=<name>`. If there is more than one pod, each pod's output
is headed by its name. Options:

- `-c`/`--container` chooses the container. The default is the pod's first container.
- `--tail N` limits the output to the last N lines.
- `-f`/`--follow` streams the logs.

```
kubectl-kaito logs workspace-llama-3 --tail 100
kubectl-kaito logs workspace-llama-3 --follow --container inference
```

### preset list

This command lists the known model presets. These are the `llama`, `falcon`,
`phi` and `mistral` families, plus the tuning presets `qlora` and `lora`.
`--model` narrows the list to one family, or to `tuning`. An unknown family
is an error.

```
kubectl-kaito preset list
kubectl-kaito preset list --model llama
kubectl-kaito preset list --model tuning
```

### delete

This command deletes one workspace (`name` or `workspace/name`), or every
workspace in the namespace with `--all`. It asks for confirmation first and
deletes only on `y` or `yes`; `--force` skips the question. With `--all`, if
one deletion fails the tool reports it and goes on with the rest.

```
kubectl-kaito delete workspace-llama-3
kubectl-kaito delete --all --force
```

### version

This command prints the tool version, commit and build date, along with the
Python version, the Python implementation and the platform. `--short` prints
only the version.

```
kaito version
kaito version --short
```

## Exit status

Errors are printed to standard error as `Error: ...`, and the exit status is
1. Bad command-line arguments exit with argparse's status 2. An interrupted
command exits with 130.

## Limitations

- Only the credentials listed above are read from a kubeconfig. Exec and
  auth-provider entries (cloud login helpers) are not run. For such clusters,
  pass `--token` or use client certificates.
- `status --watch` polls every five seconds. It does not use the Kubernetes
  watch API.

## Development

```
pip install -e ".[test]"
pytest
```