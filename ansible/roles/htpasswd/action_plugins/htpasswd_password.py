"""
Compute htpasswd compatible hashes on the controller.

    - name: Hash the web admin password
      htpasswd_password:
        password: "{{ admin_password }}"
        salt: "12341234"
      register: admin_hash
      no_log: true

    admin_hash.sha512 -> $6$12341234$...

Nothing is written anywhere: the same password and salt give the same hashes
on every run, so the task never reports a change.
"""

import hashlib
import importlib.util
import os
import re
import sys

from ansible.errors import AnsibleActionFail
from ansible.module_utils.common.text.converters import to_bytes, to_text
from ansible.plugins.action import ActionBase
from ansible.utils.display import Display

display = Display()


def _import_helpers(name="htpasswd_utils"):
    """
    Import the helper package that sits next to this file. Ansible loads
    action plugins by path and never puts action_plugins/ on sys.path.
    """
    if name in sys.modules:
        return sys.modules[name]

    pkg_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), name)
    spec = importlib.util.spec_from_file_location(
        name,
        os.path.join(pkg_dir, "__init__.py"),
        submodule_search_locations=[pkg_dir],
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[name]
        raise
    return module


_import_helpers()

from htpasswd_utils.salt import validate_salt  # noqa: E402
from htpasswd_utils.sha512crypt import sha512_crypt  # noqa: E402


SENSITIVE_KEY_PAT = re.compile(
    r"(pass|password|passwd|secret|token|key|api[_-]?key|auth|authorization|cookie)$",
    re.IGNORECASE,
)


class ActionModule(ActionBase):
    """Hash a password into sha512 crypt and salted sha256 forms."""

    TRANSFERS_FILES = False
    _VALID_ARGS = frozenset(("password", "salt"))
    _requires_connection = False

    def run(self, tmp=None, task_vars=None):
        result = super(ActionModule, self).run(tmp, task_vars)
        del tmp
        args = self._task.args

        try:
            self._validate_required_args(args, result)
            password = to_text(args["password"], errors="surrogate_or_strict")
            salt = validate_salt(to_text(args.get("salt") or ""))

            result.update(self._compute_hashes(password, salt))
            result.update(
                changed=False,
                msg="Computed sha512 and sha256 hashes"
                + (f" using a salt of {len(salt)} characters" if salt else " without salt"),
            )

        except AnsibleActionFail as ex:
            result.setdefault("failed", True)
            result.setdefault("msg", ex.message)
            self._ensure_invocation(result)
        except Exception as ex:
            result.setdefault("failed", True)
            import traceback

            tr = traceback.format_exc()
            result.setdefault("msg", f"Unhandled error in action plugin {tr}")
            self._ensure_invocation(result)
            raise AnsibleActionFail(message=result["msg"], result=result, orig_exc=ex)

        self._ensure_invocation(result)
        return result

    def _ensure_invocation(self, result):
        if self._task.no_log:
            result["invocation"] = "CENSORED: no_log is set"
            return result

        result["invocation"] = self._task.args.copy()
        result["invocation"]["module_args"] = self._task.args.copy()

        invocation = result["invocation"]
        module_args = result["invocation"]["module_args"]

        for key in list(invocation):
            if SENSITIVE_KEY_PAT.search(str(key)):
                invocation[key] = f"CENSORED: {key} is a no_log parameter"
                if key in module_args:
                    module_args[key] = "VALUE_SPECIFIED_IN_NO_LOG_PARAMETER"

        for k in list(result):
            if SENSITIVE_KEY_PAT.search(str(k)):
                result[k] = "VALUE_SPECIFIED_IN_NO_LOG_PARAMETER"
        return result

    def _validate_required_args(self, args, result):
        """Validate that all required arguments are present."""
        required = ["password"]
        missing = [r for r in required if args.get(r) is None]
        if missing:
            self._ensure_invocation(result)
            raise AnsibleActionFail(
                message=f"Missing required args: {', '.join(missing)}"
            )

    def _compute_hashes(self, password: str, salt: str) -> dict:
        display.vvv(f"htpasswd_password: sha512 crypt with a {len(salt)} byte salt")
        sha512 = sha512_crypt(password, salt)

        sha256 = hashlib.sha256(to_bytes(salt + password, errors="surrogate_or_strict"))
        display.vvv("htpasswd_password: salted sha256 computed")

        return dict(sha512=sha512, sha256=sha256.hexdigest())
