#!/usr/bin/env python3
"""
Internationalization (i18n) Module

SINGLE SOURCE OF TRUTH for all user-visible text.
All dialog titles, messages and button labels MUST be defined here and
accessed via tr().

- NO user-visible literals outside this module
- Fallback: missing key in selected lang -> try 'en' -> fail loudly
"""

from typing import Dict

# =============================================================================
# Available Languages
# =============================================================================

AVAILABLE_LANGUAGES: Dict[str, str] = {
    "en": "English",
    "de": "Deutsch",
    "zh": "中文",
}

# =============================================================================
# Translation Table
# =============================================================================

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        # Pre-encrypt
        "title_preencrypt_done": "Pre-encryption done",
        "msg_preencrypt_done": "Device {device} has been pre-encrypted, please reboot to finish encryption.",
        "title_preencrypt_failed": "Pre-encryption failed",
        "msg_preencrypt_failed": "Device {device} pre-encryption failed, please see log for more information.({code})",
        # Encrypt
        "title_encrypt_disk": "Encrypt disk",
        "title_encrypt_done": "Encrypt done",
        "msg_encrypt_done": "Device {device} has been encrypted",
        "title_encrypt_failed": "Encrypt failed",
        "msg_encrypt_failed": "Device {device} encrypt failed, please see log for more information.({code})",
        # Decrypt
        "title_decrypt_disk": "Decrypt disk",
        "title_decrypt_done": "Decrypt done",
        "msg_decrypt_done": "Device {device} has been decrypted",
        "title_decrypt_device": "Decrypt device",
        "msg_reboot_to_decrypt": "Please reboot to decrypt device {device}.",
        "title_decrypt_failed": "Decrypt failed",
        "msg_decrypt_failed": "Device {device} decrypt failed, please see log for more information.({code})",
        # Change passphrase
        "title_chg_pwd": "Change passphrase",
        "title_chg_pwd_done": "Change passphrase done",
        "msg_chg_pwd_done": "{device}'s passphrase has been changed",
        "title_chg_pwd_failed": "Change passphrase failed",
        "msg_chg_pwd_failed": "Device {device} change passphrase failed, please see log for more information.({code})",
        # Shared
        "msg_user_cancelled": "User cancelled operation",
        "msg_wrong_passphrase_or_pin": "Wrong passphrase or PIN",
        # Device password hook
        "title_wrong_pin": "Wrong PIN",
        "title_wrong_passphrase": "Wrong passphrase",
        "title_tpm_error": "TPM error",
        "msg_use_recovery_key": "Please use recovery key to unlock device.",
        # Progress windows
        "progress_encrypting": "Encrypting...{device}",
        "progress_decrypting": "Decrypting...{device}",
        "progress_hint": "Do not remove the disk or power off during the process.",
        # Unlock dialog
        "unlock_title": "Unlock partition",
        "unlock_placeholder_pwd": "Please enter the passphrase",
        "unlock_placeholder_pin": "Please enter the PIN",
        "unlock_by_pwd": "Unlock by passphrase",
        "unlock_by_pin": "Unlock by PIN",
        # Buttons
        "btn_cancel": "Cancel",
        "btn_unlock": "Unlock",
        "btn_reboot_later": "Reboot later",
        "btn_reboot_now": "Reboot now",
    },
    "de": {
        "title_preencrypt_done": "Vorverschlüsselung abgeschlossen",
        "msg_preencrypt_done": "Gerät {device} wurde vorverschlüsselt, bitte neu starten, um die Verschlüsselung abzuschließen.",
        "title_preencrypt_failed": "Vorverschlüsselung fehlgeschlagen",
        "msg_preencrypt_failed": "Vorverschlüsselung von Gerät {device} fehlgeschlagen, Details siehe Protokoll.({code})",
        "title_encrypt_disk": "Datenträger verschlüsseln",
        "title_encrypt_done": "Verschlüsselung abgeschlossen",
        "msg_encrypt_done": "Gerät {device} wurde verschlüsselt",
        "title_encrypt_failed": "Verschlüsselung fehlgeschlagen",
        "msg_encrypt_failed": "Verschlüsselung von Gerät {device} fehlgeschlagen, Details siehe Protokoll.({code})",
        "title_decrypt_disk": "Datenträger entschlüsseln",
        "title_decrypt_done": "Entschlüsselung abgeschlossen",
        "msg_decrypt_done": "Gerät {device} wurde entschlüsselt",
        "title_decrypt_device": "Gerät entschlüsseln",
        "msg_reboot_to_decrypt": "Bitte neu starten, um Gerät {device} zu entschlüsseln.",
        "title_decrypt_failed": "Entschlüsselung fehlgeschlagen",
        "msg_decrypt_failed": "Entschlüsselung von Gerät {device} fehlgeschlagen, Details siehe Protokoll.({code})",
        "title_chg_pwd": "Passphrase ändern",
        "title_chg_pwd_done": "Passphrase geändert",
        "msg_chg_pwd_done": "Die Passphrase von {device} wurde geändert",
        "title_chg_pwd_failed": "Passphrase ändern fehlgeschlagen",
        "msg_chg_pwd_failed": "Ändern der Passphrase von Gerät {device} fehlgeschlagen, Details siehe Protokoll.({code})",
        "msg_user_cancelled": "Vorgang vom Benutzer abgebrochen",
        "msg_wrong_passphrase_or_pin": "Falsche Passphrase oder PIN",
        "title_wrong_pin": "Falsche PIN",
        "title_wrong_passphrase": "Falsche Passphrase",
        "title_tpm_error": "TPM-Fehler",
        "msg_use_recovery_key": "Bitte den Wiederherstellungsschlüssel verwenden, um das Gerät zu entsperren.",
        "progress_encrypting": "Verschlüssele...{device}",
        "progress_decrypting": "Entschlüssele...{device}",
        "progress_hint": "Datenträger während des Vorgangs nicht entfernen und nicht ausschalten.",
        "unlock_title": "Partition entsperren",
        "unlock_placeholder_pwd": "Bitte Passphrase eingeben",
        "unlock_placeholder_pin": "Bitte PIN eingeben",
        "unlock_by_pwd": "Mit Passphrase entsperren",
        "unlock_by_pin": "Mit PIN entsperren",
        "btn_cancel": "Abbrechen",
        "btn_unlock": "Entsperren",
        "btn_reboot_later": "Später neu starten",
        "btn_reboot_now": "Jetzt neu starten",
    },
    "zh": {
        "title_preencrypt_done": "预加密完成",
        "msg_preencrypt_done": "设备 {device} 已完成预加密，请重启以完成加密。",
        "title_preencrypt_failed": "预加密失败",
        "msg_preencrypt_failed": "设备 {device} 预加密失败，请查看日志获取更多信息。({code})",
        "title_encrypt_disk": "加密磁盘",
        "title_encrypt_done": "加密完成",
        "msg_encrypt_done": "设备 {device} 已加密",
        "title_encrypt_failed": "加密失败",
        "msg_encrypt_failed": "设备 {device} 加密失败，请查看日志获取更多信息。({code})",
        "title_decrypt_disk": "解密磁盘",
        "title_decrypt_done": "解密完成",
        "msg_decrypt_done": "设备 {device} 已解密",
        "title_decrypt_device": "解密设备",
        "msg_reboot_to_decrypt": "请重启以解密设备 {device}。",
        "title_decrypt_failed": "解密失败",
        "msg_decrypt_failed": "设备 {device} 解密失败，请查看日志获取更多信息。({code})",
        "title_chg_pwd": "修改密码",
        "title_chg_pwd_done": "密码修改完成",
        "msg_chg_pwd_done": "{device} 的密码已修改",
        "title_chg_pwd_failed": "密码修改失败",
        "msg_chg_pwd_failed": "设备 {device} 密码修改失败，请查看日志获取更多信息。({code})",
        "msg_user_cancelled": "用户取消了操作",
        "msg_wrong_passphrase_or_pin": "密码或 PIN 码错误",
        "title_wrong_pin": "PIN 码错误",
        "title_wrong_passphrase": "密码错误",
        "title_tpm_error": "TPM 错误",
        "msg_use_recovery_key": "请使用恢复密钥解锁设备。",
        "progress_encrypting": "正在加密...{device}",
        "progress_decrypting": "正在解密...{device}",
        "progress_hint": "过程中请勿移除磁盘或断电。",
        "unlock_title": "解锁分区",
        "unlock_placeholder_pwd": "请输入密码",
        "unlock_placeholder_pin": "请输入 PIN 码",
        "unlock_by_pwd": "使用密码解锁",
        "unlock_by_pin": "使用 PIN 码解锁",
        "btn_cancel": "取消",
        "btn_unlock": "解锁",
        "btn_reboot_later": "稍后重启",
        "btn_reboot_now": "立即重启",
    },
}


# =============================================================================
# Translation Function
# =============================================================================


def tr(key: str, *, lang: str = "en", **kwargs) -> str:
    """
    Translate a string key to the specified language.

    Args:
        key: Translation key (e.g., "title_encrypt_done")
        lang: Target language code (default: "en")
        **kwargs: Format arguments for string interpolation

    Returns:
        Translated string

    Raises:
        KeyError: If key is missing in both selected lang and 'en' fallback

    Examples:
        tr("btn_reboot_now")  # "Reboot now"
        tr("msg_encrypt_done", device="sda1(sda1)")
    """
    # Try selected language
    if lang in TRANSLATIONS and key in TRANSLATIONS[lang]:
        template = TRANSLATIONS[lang][key]
        return template.format(**kwargs) if kwargs else template

    # Fallback to English
    if key in TRANSLATIONS.get("en", {}):
        template = TRANSLATIONS["en"][key]
        return template.format(**kwargs) if kwargs else template

    # Hard fail - missing key even in English
    raise KeyError(
        f"Translation key '{key}' not found in language '{lang}' "
        f"nor in fallback language 'en'. This is a programming error."
    )
