"""Ready-made filters: any request, remote address, body, cookies and compression."""