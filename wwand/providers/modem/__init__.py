"""
Modem Providers
- mmcli: ModemManager command-line adapter
- qmi: qmicli packet-service status probe
"""
